"""API routers."""

from buylow.routers.admin import router as admin_router
from buylow.routers.portfolio import router as portfolio_router
from buylow.routers.public import router as public_router
from buylow.routers.trader import router as trader_router

__all__ = ["admin_router", "portfolio_router", "public_router", "trader_router"]
