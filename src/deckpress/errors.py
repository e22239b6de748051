"""Exception hierarchy for Deck Press.

Provides structured error handling with specific exception types
for different failure modes.
"""


class DeckPressError(Exception):
    """Base exception for all Deck Press errors.

    All custom exceptions inherit from this base class for easy catching.
    """

    pass


class FetchError(DeckPressError):
    """A single image or catalog lookup failed (network, decode, not found)."""

    pass


class NameMismatchError(FetchError):
    """A collection lookup returned a card whose name differs from the request."""

    def __init__(self, expected: str, actual: str):
        super().__init__(f'Card name mismatch: expected "{expected}", got "{actual}"')
        self.expected = expected
        self.actual = actual


class EmptyArtifactError(DeckPressError):
    """Every unit of an export run failed, so there is nothing to emit."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ValidationError(DeckPressError):
    """Validation errors (invalid input, malformed data)."""

    pass


class DeckParsingError(ValidationError):
    """Card list or deck file parsing errors."""

    pass


class OperationCancelledError(DeckPressError):
    """A running export or import was cancelled or ran past its deadline."""

    pass
