#!/usr/bin/env python3
"""
Test runner script for MCP Conductor.

Wraps pytest with the options used most often during development.
"""

import argparse
import subprocess
import sys
from pathlib import Path


def run_tests(args):
    """Run the test suite with specified options."""

    cmd = [sys.executable, "-m", "pytest", "src/mcp_conductor/tests"]

    if args.verbose:
        cmd.extend(["-v", "-s"])

    if args.unit:
        cmd.extend(["-m", "unit"])
    elif args.integration:
        cmd.extend(["-m", "integration"])
    elif not args.include_slow:
        cmd.extend(["-m", "not slow"])

    if args.coverage:
        cmd.extend([
            "--cov=mcp_conductor",
            "--cov-report=html",
            "--cov-report=term-missing"
        ])

    if args.keyword:
        cmd.extend(["-k", args.keyword])

    if args.pytest_args:
        cmd.extend(args.pytest_args.split())

    print(f"Running command: {' '.join(cmd)}")
    print("-" * 60)

    try:
        result = subprocess.run(cmd, cwd=Path(__file__).parent)
        return result.returncode
    except KeyboardInterrupt:
        print("\nTest run interrupted by user")
        return 1


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run MCP Conductor tests",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_tests.py                    # Run all fast tests
  python run_tests.py --verbose          # Run with verbose output
  python run_tests.py --coverage         # Run with coverage reporting
  python run_tests.py -k dispatcher      # Run tests matching a keyword
        """
    )

    parser.add_argument("--unit", action="store_true", help="Run only unit tests")
    parser.add_argument("--integration", action="store_true", help="Run only integration tests")
    parser.add_argument("--include-slow", action="store_true", help="Include slow tests in the run")
    parser.add_argument("--verbose", "-v", action="store_true", help="Run tests with verbose output")
    parser.add_argument("--coverage", action="store_true", help="Generate coverage report")
    parser.add_argument("-k", dest="keyword", help="Only run tests matching the expression")
    parser.add_argument("--pytest-args", type=str, help="Additional arguments to pass to pytest")

    args = parser.parse_args()
    return run_tests(args)


if __name__ == "__main__":
    sys.exit(main())
