"""
Command-line argument parser for MCP Conductor.
"""

import argparse

from .. import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mcp-conductor",
        description="MCP Conductor - pick and configure MCP capability providers for a request",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mcp-conductor /quick                           # Run a super-command
  mcp-conductor "데이터베이스 쿼리 최적화 분석"     # Alias inside free text
  mcp-conductor "implement the payment service" --files src/App.tsx package.json
  mcp-conductor --list-providers                 # Show the provider catalog
  mcp-conductor --feedback req_0123456789abcdef 4
        """
    )

    parser.add_argument(
        "text",
        nargs="?",
        default=None,
        help="Request text, a /command or an alias"
    )

    # Basic options
    parser.add_argument(
        "--version",
        action="version",
        version=f"MCP Conductor {__version__}"
    )

    parser.add_argument(
        "--config",
        type=str,
        metavar="PATH",
        help="Path to configuration file"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    # Request context
    parser.add_argument(
        "--session",
        type=str,
        metavar="ID",
        help="Session id to reuse"
    )

    parser.add_argument(
        "--files",
        nargs="+",
        metavar="PATH",
        help="Project file paths used for profile and complexity detection"
    )

    parser.add_argument(
        "--project-type",
        type=str,
        metavar="TYPE",
        help="Explicit project type (e.g. react, spring-boot)"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )

    # Catalog and history
    info_group = parser.add_mutually_exclusive_group()

    info_group.add_argument(
        "--list-providers",
        action="store_true",
        help="List capability providers"
    )

    info_group.add_argument(
        "--list-commands",
        action="store_true",
        help="List super-commands and aliases"
    )

    info_group.add_argument(
        "--stats",
        action="store_true",
        help="Show usage statistics"
    )

    info_group.add_argument(
        "--feedback",
        nargs=2,
        metavar=("REQUEST_ID", "RATING"),
        help="Rate an earlier request from 1 to 5"
    )

    return parser


def parse_args(args=None):
    """Parse command line arguments."""
    parser = create_parser()
    return parser.parse_args(args)
