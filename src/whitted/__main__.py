"""Allow running the renderer with ``python -m whitted``."""

import sys

from whitted.cli import main

sys.exit(main())
