"""
Main entrypoint: one token giveaway run, compressed vs. direct transaction sizes.

Connects to SOLANA_RPC_URL (default: local validator at http://127.0.0.1:8899),
funds a distributor by airdrop, mints the token, picks winners, and prints the
serialized size of the transfer batch with and without an address lookup table.

Equivalent: python -m token_giveaway.runner, or the token-giveaway console script.
"""

import sys

# Configure structured logging before other imports that may log
from token_giveaway.giveaway_logging import get_logger  # noqa: F401
from token_giveaway.runner import main

if __name__ == "__main__":
    sys.exit(main())
