"""Transform hooks for property, content and filename rewriting."""
