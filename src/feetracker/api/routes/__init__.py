"""Route modules for the query surface."""
