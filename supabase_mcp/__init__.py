"""MCP server exposing Supabase data, storage, functions and admin APIs as tools."""

__version__ = "0.1.0"
