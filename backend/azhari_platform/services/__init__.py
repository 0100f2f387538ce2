"""Application services used by the API routes."""
