"""Exception hierarchy for the verification core."""

from __future__ import annotations


class ClaimTrailError(Exception):
    """Base class for all claim_trail errors."""


class EvaluatorError(ClaimTrailError):
    """An evaluator could not produce a report."""


class ReasoningError(ClaimTrailError):
    """The reasoning service call failed after retries (or immediately)."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class GraphValidationError(ClaimTrailError):
    """A source graph violates its structural invariants."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("Invalid source graph: " + "; ".join(errors))
        self.errors = list(errors)


class PersistenceError(ClaimTrailError):
    """A durable write (record store or ledger) failed."""


class VerificationError(ClaimTrailError):
    """Verification failed. The public message never carries internal detail."""

    PUBLIC_MESSAGE = "Verification failed"

    def __init__(self, detail: str = "", *, debug: bool = False) -> None:
        super().__init__(self.PUBLIC_MESSAGE)
        self.detail = detail
        self.debug = debug

    def public_message(self) -> str:
        if self.debug and self.detail:
            return f"{self.PUBLIC_MESSAGE}: {self.detail}"
        return self.PUBLIC_MESSAGE
