"""Run the solswap CLI: python -m solswap."""

import sys

from solswap.cli import main

sys.exit(main())
