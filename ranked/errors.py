"""
Engine error taxonomy.

Every precondition failure raises one of these. The HTTP layer maps
``status_code`` and ``code`` straight into the JSON error body.
"""


class RankedError(Exception):
    """Base class for all engine errors."""
    code = "error"
    status_code = 500

    def __init__(self, message: str = None):
        self.message = message or self.__class__.__doc__
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'error': self.message, 'code': self.code}


class AlreadyExists(RankedError):
    """Entity already exists."""
    code = "already_exists"
    status_code = 409


class NotFound(RankedError):
    """Entity not found."""
    code = "not_found"
    status_code = 404


class InvalidInput(RankedError):
    """Invalid input."""
    code = "invalid_input"
    status_code = 400


class AlreadyResolved(RankedError):
    """Match already complete."""
    code = "match_already_complete"
    status_code = 409

    def __init__(self, match_address: str = None):
        self.match_address = match_address
        message = f"Match {match_address} already complete" if match_address else None
        super().__init__(message)


class Unauthorized(RankedError):
    """Caller is not the namespace admin."""
    code = "unauthorized"
    status_code = 403
