"""
Registre central des routers (API checkout, catalogue, réglages, health).
"""
from fastapi import FastAPI
from storefront.payments import views as payments_views
from storefront.catalog import views as catalog_views
from storefront.remote_config import views as remote_config_views
from storefront.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(catalog_views.router)
    app.include_router(remote_config_views.router)
    app.include_router(health_router)
