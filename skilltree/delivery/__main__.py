"""
Entry point for running the terminal player as a module.

Usage:
    python -m skilltree.delivery play
    python -m skilltree.delivery stats
    python -m skilltree.delivery --help
"""
from .cli import main

if __name__ == "__main__":
    main()
