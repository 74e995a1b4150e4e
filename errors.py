"""Error taxonomy for the PVSS engine."""

from __future__ import annotations


class PVSSError(Exception):
    """Base class for every failure raised by the engine."""


class InvalidInput(PVSSError, ValueError):
    """Mismatched list lengths, out-of-range threshold/index or a malformed encoding."""


class InvalidProof(PVSSError):
    """A DLEQ or Feldman check failed on untrusted data.

    ``index`` names the node whose contribution failed, when known, so the
    session layer can raise a complaint against it.
    """

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class CurveError(PVSSError, ValueError):
    """Point decoding failed or the point is not on the curve."""


class HashToPointExhausted(PVSSError, RuntimeError):
    """hash_to_point hit its iteration cap without finding a curve point."""

    def __init__(self, iterations: int) -> None:
        super().__init__(f"no curve point found after {iterations} iterations")
        self.iterations = iterations


class ScalarArithmeticError(PVSSError, ZeroDivisionError):
    """Invalid scalar arithmetic, e.g. inverting zero."""
