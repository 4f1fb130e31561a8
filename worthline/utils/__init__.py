# worthline/utils/__init__.py
"""
Utility modules for Worthline.

Cross-cutting helpers used throughout the application:
- logging: Logging configuration with correlation ID support
- context: Request context (correlation ID)
- decimal_utils: Exact decimal parsing, normalization and rounding
- formatting: Timestamp wire formats
- date_utils: Calendar date parsing and day boundaries

Usage:
    from worthline.utils import setup_logging
    from worthline.utils.decimal_utils import normalize_decimal
"""

from worthline.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from worthline.utils.logging import setup_logging

__all__ = [
    # Logging
    "setup_logging",
    # Context
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
