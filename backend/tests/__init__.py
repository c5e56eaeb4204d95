"""
Pytest test suite for the loyalty registry backend.

Test categories:
- Unit tests: registry core, ownership ledger, access control, services
- API tests: full FastAPI app over httpx with in-memory SQLite
"""
