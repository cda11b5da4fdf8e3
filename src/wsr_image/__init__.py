"""Extract base64 JPEG attachments from MHTML web archives."""

__version__ = "0.1.0"
