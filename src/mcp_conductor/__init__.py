"""
MCP Conductor - capability provider orchestration for MCP clients.

Turns a request (free text, a ``/command`` or an alias) plus optional project
context into an activation config: which providers to enable, which flags to
pass, and a short rationale.

    from mcp_conductor import RequestDispatcher

    dispatcher = RequestDispatcher()
    result = dispatcher.process_request_sync("/quick")
    print(result.config.providers)   # ("context7",)
"""

__version__ = "0.1.0"

from .core import RequestDispatcher

__all__ = ["RequestDispatcher", "__version__"]
