"""Error taxonomy shared by the services and the API layer.

Services raise these; ``chorely.main`` renders them as JSON with the
matching HTTP status.
"""


class ChoreError(Exception):
    """Base class for all Chorely domain errors."""

    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    @property
    def code(self) -> str:
        return self.__class__.__name__


class ValidationError(ChoreError):
    """Malformed or out-of-range input, rejected before touching storage."""

    status_code = 422


class Unauthenticated(ChoreError):
    """No identity on a procedure that requires one."""

    status_code = 401


class Forbidden(ChoreError):
    """Identity present but lacking the required relationship."""

    status_code = 403


class NotFound(ChoreError):
    """Referenced invite code or family does not exist."""

    status_code = 404


class Conflict(ChoreError):
    """Would violate the single-family-per-user invariant."""

    status_code = 409


class Unavailable(ChoreError):
    """Storage unreachable, or invite-code retry ceiling exceeded."""

    status_code = 503
