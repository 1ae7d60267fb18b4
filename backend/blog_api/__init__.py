"""
Oleang Blog API: Application Package Initializer
================================================

What: Marks the `blog_api` directory as a Python package.
Who:  Used by the import system and explicitly by Alembic, pytest and uvicorn.

Architecture Note:
    The backend is a thin layer over a hosted data/auth platform:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Route Logic)      │  ← joins, two-phase likes, error mapping
    ├─────────────────────────────────────┤
    │        Schemas (API Contract)       │  ← Pydantic request/response models
    ├─────────────────────────────────────┤
    │      RemoteStore (Persistence)      │  ← PostgREST + GoTrue over httpx
    └─────────────────────────────────────┘

    Nothing is persisted in-process; every request runs start to finish
    against the remote store.
"""

__version__ = "1.0.0"
