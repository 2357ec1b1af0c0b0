from fastapi import APIRouter

from .endpoints import articles, admin

api_router = APIRouter()

api_router.include_router(articles.router, prefix="/articles", tags=["articles"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
