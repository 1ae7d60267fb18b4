"""
Oleang Blog API: Request Dependencies
=====================================

What:  FastAPI dependencies exposing the per-app Settings and RemoteStore.
How:   create_app() stores both on `app.state`; these functions read them
       back for each request.

Example usage in a route:
    @router.get("/posts")
    async def list_posts(store: RemoteStore = Depends(get_store)):
        ...
"""

from fastapi import Request

from blog_api.config import Settings
from blog_api.services.store_base import RemoteStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RemoteStore:
    return request.app.state.store
