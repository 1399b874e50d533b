from fastapi import APIRouter

from recipe_ai.app.api.routes import admin, recipes

api_router = APIRouter()
api_router.include_router(admin.router)
api_router.include_router(recipes.router)
