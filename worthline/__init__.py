# worthline/__init__.py
"""
Worthline - portfolio valuation and change-history engine.

Values personal financial accounts (bank, brokerage, crypto) at any date
in any currency, and reports how that value moved between the instants
at which balances, prices or FX rates changed.

Packages:
- services: Valuation, market data resolution, change-point history
- schemas: API response models
- routers: FastAPI endpoints
"""

__version__ = "0.1.0"
