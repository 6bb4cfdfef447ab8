# shopify_bridge/api/router.py
from fastapi import APIRouter
from shopify_bridge.api.endpoints import customers, favorites, spas, interactions

api_router = APIRouter()

# Пути совпадают с теми, что уже использует витрина
api_router.include_router(customers.router, tags=["Customers"])
api_router.include_router(favorites.router, tags=["Favorites"])
api_router.include_router(spas.router, tags=["Spas"])
api_router.include_router(interactions.router, prefix="/api", tags=["Interactions"])
