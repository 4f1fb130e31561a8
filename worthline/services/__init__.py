# worthline/services/__init__.py
"""
Service layer.

Subpackages:
    market_data/  - Market data stores and the price/FX resolver
    valuation/    - Point-in-time portfolio snapshots
    history/      - Change-point collection, filtering and history reports

Modules:
    asset_identity - Canonical asset identities
    protocols      - Collaborator interfaces (storage, market data)
    storage        - In-memory storage collaborator
    exceptions     - Service layer exceptions
"""
