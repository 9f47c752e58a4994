"""Domain layer: payload schemas and repository protocols."""
