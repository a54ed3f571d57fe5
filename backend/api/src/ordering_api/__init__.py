"""FastAPI application for D818 online ordering."""
