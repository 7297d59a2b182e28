"""
Main entry point for the MCP Conductor CLI application.

This module provides the entry point used by the installed
``mcp-conductor`` console script.
"""

import sys

from .cli import parse_args, handle_cli_command


def main(argv=None) -> int:
    """Parse arguments and run the requested command."""
    try:
        args = parse_args(argv)
        return handle_cli_command(args)
    except KeyboardInterrupt:
        print("\n👋 Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
