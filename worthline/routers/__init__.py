# worthline/routers/__init__.py
"""
API routers.

Usage:
    from worthline.routers import portfolio_router

    app.include_router(portfolio_router)
"""

from worthline.routers.portfolio import router as portfolio_router

__all__ = ["portfolio_router"]
