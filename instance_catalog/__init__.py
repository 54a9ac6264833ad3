"""Local catalog of mod manager instances backed by an index file."""
