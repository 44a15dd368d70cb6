"""Repository functions grouped by domain (members, content, events, store, ...)."""
