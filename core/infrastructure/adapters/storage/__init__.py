"""Document storage adapters."""
