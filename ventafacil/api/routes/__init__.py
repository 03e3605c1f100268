"""API route modules."""

from ventafacil.api.routes.health import router as health_router
from ventafacil.api.routes.sales import router as sales_router

__all__ = ["health_router", "sales_router"]
