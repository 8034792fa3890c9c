"""
Custom exceptions for Verdant.

The engine distinguishes bad user input (InvalidParameter), impossible
arithmetic (DivisionUndefined) and failures of external collaborators
(UpstreamUnavailable). Only the last one is allowed to be swallowed by
callers; the core ranking never depends on an upstream service.
"""


class InvalidParameter(ValueError):
    """
    Raised when user-supplied parameters or per-instrument inputs are invalid.

    The calculation is not run and nothing downstream is touched. API
    endpoints should return 400 with the collected messages.

    Attributes:
        errors: List of human-readable error messages
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        message = "; ".join(errors) if errors else "Invalid parameter"
        super().__init__(message)


class DivisionUndefined(ArithmeticError):
    """
    Raised when an allocation is attempted over an empty subset or one whose
    composite scores sum to zero.

    Never emit NaN or Infinity silently in its place.
    """

    pass


class UpstreamUnavailable(Exception):
    """
    Raised when external services (LLM, market data) are unreachable or fail unexpectedly.

    This exception type signals that the failure is due to infrastructure issues,
    not invalid input or engine logic. API endpoints should return
    503 Service Unavailable when catching this exception.

    Examples:
        - LLM API connection timeout
        - Market data API returns 5xx error
        - Quote payload cannot be parsed
    """

    pass


class CatalogError(Exception):
    """Raised when the instrument catalog cannot be loaded or fails validation."""

    pass


class StaleResultError(Exception):
    """
    Raised when an asynchronous side task (narrative, quote refresh) completes
    after the calculation snapshot it was issued for has been superseded.
    """

    def __init__(self, issued_generation: int, current_generation: int):
        self.issued_generation = issued_generation
        self.current_generation = current_generation
        super().__init__(
            f"Result for generation {issued_generation} discarded; "
            f"current generation is {current_generation}"
        )


class NoResultError(LookupError):
    """Raised when an operation needs a published result and none exists yet."""

    pass
