# main.py

import sys

from burningship.cli import main

if __name__ == "__main__":
    sys.exit(main())
