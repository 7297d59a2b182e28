#!/usr/bin/env python3
"""
MCP Conductor - picks MCP capability providers for each request

Development entry point; the installed package exposes the same
command as ``mcp-conductor``.
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from mcp_conductor.main import main


if __name__ == "__main__":
    sys.exit(main())
