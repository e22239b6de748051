"""Image archive assembly."""
