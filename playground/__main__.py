"""Main entry point when executing playground as a package.

This allows running the package using python -m playground.
"""

from playground.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
