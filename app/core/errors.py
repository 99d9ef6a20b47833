# =============================================================================================
# APP/CORE/ERRORS.PY - DOMAIN ERROR HIERARCHY
# =============================================================================================
# Services raise these; app/core/handlers.py turns them into HTTP responses.
#
# Each error carries:
# - message: human-readable text sent to the client as "msg"
# - code: machine-readable identifier (used in logs)
# - status_code: HTTP status the boundary answers with
#
# The set is closed: anything that is not a CurrencyAppError is treated as an
# internal error (500, generic message, logged).
# =============================================================================================

from fastapi import status

__all__ = [
    "CurrencyAppError",
    "CurrencyNotFound",
    "CurrencyAlreadyExists",
    "ExchangeRateNotFound",
    "ValidationFailure",
    "AuthenticationFailure",
    "PermissionDenied",
]


class CurrencyAppError(Exception):
    """Base class for every error the service layer raises on purpose."""

    code: str = "app_error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


# -------------------------
# Currency errors
# -------------------------
class CurrencyNotFound(CurrencyAppError):
    """A referenced currency symbol is not stored."""

    code = "currency_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Currency {symbol} not found")


class CurrencyAlreadyExists(CurrencyAppError):
    code = "currency_already_exists"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Currency {symbol} already exists")


class ExchangeRateNotFound(CurrencyAppError):
    """No direct base → target edge exists (no multi-hop lookup is attempted)."""

    code = "exchange_rate_not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, base: str, target: str):
        self.base = base
        self.target = target
        super().__init__(f"Exchange rate from {base} to {target} not found")


# -------------------------
# Request-level errors
# -------------------------
class ValidationFailure(CurrencyAppError):
    """Input is well-formed but violates a rule (e.g. base == target, rate <= 0)."""

    code = "validation_failure"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationFailure(CurrencyAppError):
    """
    Bad credentials or an invalid/expired/revoked token.

    Messages stay generic on purpose: callers never learn whether the email was
    unknown or the password wrong, or why a token was rejected.
    """

    code = "authentication_failure"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str, status_code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(message)
        self.status_code = status_code


class PermissionDenied(CurrencyAppError):
    """Authenticated caller lacks a required role tag."""

    code = "permission_denied"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"{role.capitalize()} permissions required. Access denied.")
