# worthline/services/asset_identity.py
"""
Asset identity.

Two balances refer to the "same asset" when their normalized identities
match, regardless of how a synchronizer happened to spell them
(" usd", "USD", "840" all name the same currency).

Normalization rules:
    currency: iso_code trimmed, upper-cased; numeric ISO "840" -> "USD"
    equity:   ticker and exchange trimmed, upper-cased
    crypto:   symbol trimmed, upper-cased; network trimmed, lower-cased
    Empty or whitespace-only optional fields (exchange, network) are absent.

AssetId format:
    currency/<ISO>
    equity/<TICKER>[/<EXCHANGE>]
    crypto/<SYMBOL>[/<network>]

Each segment is path-safe: separators ("/", "\\") and control characters
become "-", and segments that end up empty, "." or ".." become "_".
AssetIds double as storage keys, so they must never escape a directory.

Usage:
    from worthline.services.asset_identity import AssetId

    AssetId.from_asset(EquityAsset("aapl", "nasdaq")).value  # "equity/AAPL/NASDAQ"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from worthline.models import Asset, CryptoAsset, CurrencyAsset, EquityAsset

# Numeric ISO 4217 codes some institutions report instead of alpha codes
NUMERIC_CURRENCY_CODES = {
    "840": "USD",
}

_SEPARATORS = {"/", "\\"}


# =============================================================================
# NORMALIZATION
# =============================================================================

def normalize_currency_code(code: str) -> str:
    """
    Canonical form of a currency code.

    Example:
        >>> normalize_currency_code(" usd ")
        'USD'
        >>> normalize_currency_code("840")
        'USD'
    """
    trimmed = code.strip()
    return NUMERIC_CURRENCY_CODES.get(trimmed, trimmed.upper())


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def normalize_asset(asset: Asset) -> Asset:
    """Return the normalized copy of an asset used for identity and aggregation."""
    if isinstance(asset, CurrencyAsset):
        return CurrencyAsset(iso_code=normalize_currency_code(asset.iso_code))

    if isinstance(asset, EquityAsset):
        exchange = _optional(asset.exchange)
        return EquityAsset(
            ticker=asset.ticker.strip().upper(),
            exchange=exchange.upper() if exchange else None,
        )

    if isinstance(asset, CryptoAsset):
        network = _optional(asset.network)
        return CryptoAsset(
            symbol=asset.symbol.strip().upper(),
            network=network.lower() if network else None,
        )

    raise TypeError(f"Unsupported asset type: {type(asset).__name__}")


def same_asset(a: Asset, b: Asset) -> bool:
    """True if both assets normalize to the same identity."""
    return AssetId.from_asset(a) == AssetId.from_asset(b)


# =============================================================================
# PATH SEGMENTS
# =============================================================================

def sanitize_segment(value: str) -> str:
    """
    Make one identity segment path-safe.

    Example:
        >>> sanitize_segment(" BRK/B ")
        'BRK-B'
        >>> sanitize_segment("..")
        '_'
    """
    sanitized = "".join(
        "-" if ch in _SEPARATORS or not ch.isprintable() else ch
        for ch in value.strip()
    )
    if sanitized in ("", ".", ".."):
        return "_"
    return sanitized


# =============================================================================
# ASSET ID
# =============================================================================

@dataclass(frozen=True, order=True)
class AssetId:
    """
    Canonical, immutable identity string of an asset.

    Ordering is plain string ordering of the value, which is what every
    "sorted by AssetId" rule in the engine relies on.
    """

    value: str

    @classmethod
    def from_asset(cls, asset: Asset) -> AssetId:
        normalized = normalize_asset(asset)

        if isinstance(normalized, CurrencyAsset):
            return cls(f"currency/{sanitize_segment(normalized.iso_code).upper()}")

        if isinstance(normalized, EquityAsset):
            ticker = sanitize_segment(normalized.ticker).upper()
            if normalized.exchange is None:
                return cls(f"equity/{ticker}")
            return cls(f"equity/{ticker}/{sanitize_segment(normalized.exchange).upper()}")

        symbol = sanitize_segment(normalized.symbol).upper()
        if normalized.network is None:
            return cls(f"crypto/{symbol}")
        return cls(f"crypto/{symbol}/{sanitize_segment(normalized.network).lower()}")

    def __str__(self) -> str:
        return self.value


# =============================================================================
# SERIALIZATION
# =============================================================================

def asset_to_dict(asset: Asset) -> dict[str, Any]:
    """
    Type-tagged dict for an asset, "type" key first.

    Absent optional fields are omitted rather than emitted as null.

    Example:
        >>> asset_to_dict(CurrencyAsset("USD"))
        {'type': 'currency', 'iso_code': 'USD'}
    """
    if isinstance(asset, CurrencyAsset):
        return {"type": asset.type, "iso_code": asset.iso_code}
    if isinstance(asset, EquityAsset):
        data: dict[str, Any] = {"type": asset.type, "ticker": asset.ticker}
        if asset.exchange is not None:
            data["exchange"] = asset.exchange
        return data
    if isinstance(asset, CryptoAsset):
        data = {"type": asset.type, "symbol": asset.symbol}
        if asset.network is not None:
            data["network"] = asset.network
        return data
    raise TypeError(f"Unsupported asset type: {type(asset).__name__}")


__all__ = [
    "NUMERIC_CURRENCY_CODES",
    "normalize_currency_code",
    "normalize_asset",
    "same_asset",
    "sanitize_segment",
    "AssetId",
    "asset_to_dict",
]
