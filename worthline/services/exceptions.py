# worthline/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
main.py maps them to HTTP responses.

An unresolved price or FX rate is not an error: it yields an omitted
field and no contribution to totals. Errors raised by storage or
market-data collaborators are not wrapped either; they propagate as-is.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── InvalidDateError
    │   ├── InvalidDecimalError
    │   └── InvalidGranularityError
    └── NotFoundError
        └── AccountNotFoundError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when caller input is malformed.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidDateError(ValidationError):
    """Raised when a date string is not a valid YYYY-MM-DD calendar date."""

    def __init__(self, value: str, field: str | None = None) -> None:
        self.value = value
        label = f"{field} date" if field else "date"
        super().__init__(
            f"Invalid {label}: '{value}'. Expected YYYY-MM-DD",
            field=field,
        )


class InvalidDecimalError(ValidationError):
    """Raised when a stored or supplied amount is not a finite decimal string."""

    def __init__(self, value: object, field: str | None = None) -> None:
        self.value = value
        super().__init__(
            f"Invalid decimal value: {value!r}",
            field=field,
        )


class InvalidGranularityError(ValidationError):
    """
    Raised when a granularity string cannot be parsed.

    Valid values: none, full, hourly, daily, weekly, monthly, yearly,
    or a duration such as 90m, 6h, 2d, 1w.
    """

    def __init__(self, granularity: str) -> None:
        self.granularity = granularity
        super().__init__(
            f"Invalid granularity '{granularity}'. Valid values: "
            "none, full, hourly, daily, weekly, monthly, yearly, "
            "or a duration like 90m, 6h, 2d, 1w",
            field="granularity",
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Account")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class AccountNotFoundError(NotFoundError):
    """
    Raised when a caller explicitly requests an account that does not exist.

    Attributes:
        account_ids: Every requested id that could not be found, sorted
    """

    def __init__(self, account_ids: list[str]) -> None:
        self.account_ids = sorted(account_ids)
        joined = ", ".join(self.account_ids)
        super().__init__(
            f"Account(s) not found: {joined}",
            resource_type="Account",
            resource_id=joined,
        )


__all__ = [
    "ServiceError",
    "ValidationError",
    "InvalidDateError",
    "InvalidDecimalError",
    "InvalidGranularityError",
    "NotFoundError",
    "AccountNotFoundError",
]
