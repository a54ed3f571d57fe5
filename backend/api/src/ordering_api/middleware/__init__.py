"""HTTP middleware for the ordering API."""
