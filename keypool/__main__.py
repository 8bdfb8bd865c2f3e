"""Allow ``python -m keypool``."""

from keypool.cli.app import main

main()
