"""MCP server integration for codeqa."""
