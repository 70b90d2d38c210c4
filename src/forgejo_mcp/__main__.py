"""Entry point for running the server with ``python -m forgejo_mcp``."""

import sys


def main():
    """Main entry point for the forgejo-mcp CLI."""
    from forgejo_mcp.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
