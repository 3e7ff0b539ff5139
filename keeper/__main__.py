"""Run the text scorekeeper: ``python -m keeper --points 1121``."""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
