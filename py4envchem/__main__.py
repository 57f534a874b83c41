"""Allow ``python -m py4envchem``."""

import sys

from py4envchem.cli import main

if __name__ == "__main__":
    sys.exit(main())
