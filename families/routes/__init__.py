"""Family API route modules."""
