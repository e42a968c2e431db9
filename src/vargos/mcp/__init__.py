"""MCP server for vargos.

This module provides an MCP (Model Context Protocol) server that exposes
the vargos tool table to MCP-compatible clients.
"""

from .server import create_server, main

__all__ = ["create_server", "main"]
