# classvote/errors.py
"""Typed outcomes for every registration and voting operation.

Each failure the services can produce is a subclass of ``VotingError`` and
carries a ``kind`` (the taxonomy bucket) and an HTTP-equivalent
``status_code`` so the transport layer can surface it verbatim.

Exception hierarchy:
- VotingError
  - ValidationError: missing or malformed input
  - NotFoundError: token or voter absent
    - TokenNotFound
    - InvalidOrExpiredToken
    - InvalidToken
    - VoterNotFound
  - TokenExpired: token exists but is past its expiry
  - ConflictError: state precondition violated
    - AlreadyRegistered
    - AlreadyVoted
    - InvalidVoterOrAlreadyVoted
  - StorageError: backing store failure
"""


class VotingError(Exception):
    """Base class for all classvote failures."""
    kind = "internal"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    def to_dict(self):
        return {"error": self.message, "kind": self.kind}


class ValidationError(VotingError):
    kind = "validation"
    status_code = 400
    default_message = "Invalid input"


class NotFoundError(VotingError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class TokenNotFound(NotFoundError):
    default_message = "Token not found"


class InvalidOrExpiredToken(NotFoundError):
    default_message = "Invalid or expired token"


class InvalidToken(NotFoundError):
    default_message = "Invalid voting token"


class VoterNotFound(NotFoundError):
    default_message = "Email not found in voter registry"


class TokenExpired(VotingError):
    kind = "expired"
    status_code = 400
    default_message = "Token has expired"


class ConflictError(VotingError):
    kind = "conflict"
    status_code = 409
    default_message = "Conflict"


class AlreadyRegistered(ConflictError):
    default_message = "Email already registered"


class AlreadyVoted(ConflictError):
    default_message = "You have already voted"


class InvalidVoterOrAlreadyVoted(ConflictError):
    default_message = "Invalid voter or already voted"


class StorageError(VotingError):
    """Raised when the key-value backend fails."""
    default_message = "Storage backend failure"
