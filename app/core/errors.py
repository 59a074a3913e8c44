"""Domain failures raised below the service facade.

Every error carries the HTTP status it maps to and a stable ``code`` so the
API layer can render it without knowing the concrete class.
"""

from __future__ import annotations


class DomainError(Exception):
    status_code = 400
    code = "domain_error"
    retriable = False

    def __init__(self, message: str | None = None) -> None:
        self.message = message or (self.__doc__ or self.code).strip()
        super().__init__(self.message)


class ValidationError(DomainError):
    """Missing or malformed input."""

    code = "validation_error"


class InvalidGeometry(ValidationError):
    """Coordinates are outside the valid WGS84 range."""

    code = "invalid_geometry"


class PolicyViolation(DomainError):
    """The request breaks a community policy."""

    code = "policy_violation"


class TooFar(PolicyViolation):
    """You are too far from the toilet location to add it."""

    code = "too_far"

    def __init__(self, distance_m: float, limit_m: float) -> None:
        super().__init__(
            f"You are too far from the toilet location to add it "
            f"({distance_m:.0f} m > {limit_m:.0f} m)."
        )
        self.distance_m = distance_m
        self.limit_m = limit_m


class Duplicate(PolicyViolation):
    """A toilet already exists at this location."""

    code = "duplicate"

    def __init__(self, existing_id: int, distance_m: float) -> None:
        super().__init__(
            f"A toilet already exists at this location "
            f"(#{existing_id}, {distance_m:.0f} m away)."
        )
        self.existing_id = existing_id
        self.distance_m = distance_m


class AlreadyVoted(PolicyViolation):
    """You have already voted on this toilet."""

    code = "already_voted"


class NotFound(DomainError):
    """The requested resource does not exist."""

    status_code = 404
    code = "not_found"


class AuthenticationFailed(DomainError):
    """Missing or invalid bearer token."""

    status_code = 401
    code = "unauthorized"


class PermissionDenied(DomainError):
    """Insufficient role for this operation."""

    status_code = 403
    code = "forbidden"


class TransientInfrastructureFailure(DomainError):
    """The data store is temporarily unavailable, please retry."""

    status_code = 503
    code = "unavailable"
    retriable = True


class InvariantViolation(DomainError):
    """Internal consistency check failed."""

    status_code = 500
    code = "invariant_violation"
