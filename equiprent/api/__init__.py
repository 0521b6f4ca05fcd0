"""
equiprent External API Layer.

Provides:
- REST API (FastAPI) - Port 8000
"""
