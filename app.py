"""
App assembly entry point.

Re-exports the FastAPI `app` from `myumc.api.main` so the service can be
started with `uvicorn app:app`.
"""

from myumc.api.main import app  # noqa: F401
