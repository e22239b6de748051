"""Export and bulk import pipelines."""
