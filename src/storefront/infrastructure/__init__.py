"""Infrastructure adapters (SQL) for the storefront domain ports."""
