"""HTTP surface: REST routes, the MCP endpoint and monitoring."""
