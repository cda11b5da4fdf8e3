"""Allow ``python -m wsr_image.extractor``."""

import sys

from .cli import main

sys.exit(main())
