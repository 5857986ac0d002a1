"""Entry point for running as module: python -m intentswap"""

import sys

# Load .env file before importing anything else
from dotenv import load_dotenv
load_dotenv()

from intentswap.cli import main

if __name__ == "__main__":
    sys.exit(main())
