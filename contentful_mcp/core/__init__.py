"""Session runtime: tenant context, tool registry and server lifecycle."""
