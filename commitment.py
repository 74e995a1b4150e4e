"""Feldman commitments to polynomial coefficients."""

from __future__ import annotations

from typing import Sequence, Tuple

from curve import CurveContext, CurvePoint, default_context
from errors import InvalidInput
from field import Scalar
from polynomial import Polynomial


def commit(poly: Polynomial, ctx: CurveContext | None = None) -> Tuple[CurvePoint, ...]:
    """C_k = coeff_k · G."""
    ctx = ctx or default_context()
    return tuple(ctx.mul_g(coeff) for coeff in poly.coefficients)


def commitment_point_at(index: int, commitments: Sequence[CurvePoint]) -> CurvePoint:
    """Σ_k C_k · index^k, i.e. p(index)·G computed from public data only (Horner in the exponent)."""
    if not commitments:
        raise InvalidInput("empty commitment list")
    if index < 1:
        raise InvalidInput(f"share index must be >= 1, got {index}")
    x = Scalar(index)
    acc = CurvePoint.infinity()
    for c_k in reversed(commitments):
        acc = acc * x + c_k
    return acc


def verify_share_point(index: int, point: CurvePoint, commitments: Sequence[CurvePoint]) -> bool:
    """Check an already-public share point value·G against the commitments."""
    return commitment_point_at(index, commitments) == point


def verify_share(
    index: int,
    value: Scalar,
    commitments: Sequence[CurvePoint],
    ctx: CurveContext | None = None,
) -> bool:
    """Feldman 验证 / True iff Σ C_k·index^k == value·G."""
    ctx = ctx or default_context()
    return verify_share_point(index, ctx.mul_g(value), commitments)
