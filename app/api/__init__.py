# app/api/__init__.py
from fastapi import APIRouter

from app.api.routers import admin, auth, cart, categories, health, products

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(admin.router)
api_router.include_router(categories.router)
api_router.include_router(products.router)
api_router.include_router(cart.router)
