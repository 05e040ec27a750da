"""Built-in candidate sources."""
