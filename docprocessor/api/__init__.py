"""HTTP boundary: FastAPI router, request/response schemas and middleware."""
