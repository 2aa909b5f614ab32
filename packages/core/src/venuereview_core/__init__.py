"""Rating aggregation and review submission."""
