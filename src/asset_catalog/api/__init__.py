"""HTTP surface (FastAPI)."""
