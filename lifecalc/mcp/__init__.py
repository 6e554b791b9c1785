"""MCP server exposing life-calc projections as tools."""
