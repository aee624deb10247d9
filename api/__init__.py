"""
HTTP layer for the screening API.

Entry point: api/app.py -> run with `cancer-api-serve` or `uvicorn api.app:app`
"""
