"""Bearer-token authentication for checkout and admin endpoints."""
