"""Result values for catalog lookups and CLI handlers.

A lookup that misses returns a failed Result instead of raising, so the
batch fetcher can record the miss and move on to the next card, and the
click commands decide in one place how a failure is shown.
"""

from typing import Any, Callable, Optional, TypedDict, TypeVar

T = TypeVar("T")


class Result(TypedDict):
    """Outcome of a lookup or handler.

    Attributes:
        ok: Whether the call succeeded
        value: Payload on success, None on failure
        error: "ErrorType: message" (or a catalog message) on failure
    """

    ok: bool
    value: Optional[Any]
    error: Optional[str]


def success(value: Any) -> Result:
    return Result(ok=True, value=value, error=None)


def failure(error: str) -> Result:
    return Result(ok=False, value=None, error=error)


def from_exception(exc: Exception) -> Result:
    """Failed Result naming the exception type, e.g. "FetchError: timed out"."""
    return failure(f"{type(exc).__name__}: {exc}")


def try_operation(operation: Callable[[], T]) -> Result:
    """Run operation, turning any exception into a failed Result.

    Used at the CLI boundary so every handler reports errors the same way.
    """
    try:
        return success(operation())
    except Exception as exc:
        return from_exception(exc)


def map_result(result: Result, func: Callable[[Any], Any]) -> Result:
    """Transform the value of a successful Result.

    A failed Result passes through unchanged. An exception raised by func
    becomes a failed Result, so a catalog payload of the wrong shape is
    reported like any other miss.

    Examples:
        >>> map_result(success({"data": [1]}), lambda p: p["data"])["value"]
        [1]
    """
    if not result["ok"]:
        return result
    try:
        return success(func(result["value"]))
    except Exception as exc:
        return from_exception(exc)
