"""Allow ``python -m kpline``."""

import sys

from kpline.cli import main

if __name__ == "__main__":
    sys.exit(main())
