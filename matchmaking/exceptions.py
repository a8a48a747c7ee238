"""
Error types raised by the matching engine.

The engine is exception-light: an empty population or a population with
no eligible pairs is reported through the outcome, not raised. Only
malformed input, invalid configuration and violated matcher invariants
are raised.
"""

from typing import Optional


class MatchingError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(MatchingError, ValueError):
    """Raised when the matching configuration is invalid."""


class MalformedInputError(MatchingError, ValueError):
    """
    Raised when a participant snapshot cannot be scored.

    Attributes:
        participant_id: Id of the offending participant (None if unknown)
        field: Dotted path of the offending field, e.g. "responses.q7.importance"
        detail: Human-readable description of the problem
    """

    def __init__(self, participant_id: Optional[str], field: str, detail: str):
        self.participant_id = participant_id
        self.field = field
        self.detail = detail
        who = participant_id if participant_id is not None else "<unknown>"
        super().__init__(f"Participant {who}: invalid {field}: {detail}")


class MatchingInvariantError(MatchingError, RuntimeError):
    """Raised when the optimal matcher produces an invalid pairing."""
