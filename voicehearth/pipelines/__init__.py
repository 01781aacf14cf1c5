"""Processing pipelines."""
