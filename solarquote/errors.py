"""
errors.py — Domain exceptions raised by services

Services raise these instead of returning error dicts; main.py maps each
to a structured ErrorResponse using its status_code. Authentication and
authorization failures are not here: dependencies.py raises
HTTPException(401/403) for those so they can become redirects on pages.

Called by: services/*, main.py (exception handler)
Depends on: nothing
"""


class MarketplaceError(Exception):
    status_code = 400

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class InvalidCredentials(MarketplaceError):
    """Login rejected: unknown email, wrong password, or inactive account."""

    status_code = 401


class NotFound(MarketplaceError):
    status_code = 404


class Conflict(MarketplaceError):
    status_code = 409


class InvalidTransition(Conflict):
    """Lifecycle transition not allowed from the current state."""


class ValidationFailed(MarketplaceError):
    status_code = 422


class PersistenceFailure(MarketplaceError):
    status_code = 500
