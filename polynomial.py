"""Shamir secret-sharing polynomial over Z_n and Lagrange interpolation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from curve import CurvePoint, sum_points
from data_models import Share
from errors import InvalidInput
from field import Scalar


@dataclass(frozen=True)
class Polynomial:
    """秘密共享多项式 / coefficients[0] is the secret, threshold = degree + 1."""

    coefficients: Tuple[Scalar, ...]

    def __post_init__(self) -> None:
        if not self.coefficients:
            raise InvalidInput("polynomial needs at least one coefficient")
        if not all(isinstance(c, Scalar) for c in self.coefficients):
            raise InvalidInput("polynomial coefficients must be Scalars")

    @classmethod
    def random(cls, secret: Scalar, threshold: int) -> "Polynomial":
        """Secret as constant term, threshold-1 coefficients from the CSPRNG."""
        if threshold < 1:
            raise InvalidInput(f"threshold must be >= 1, got {threshold}")
        return cls((secret,) + tuple(Scalar.random() for _ in range(threshold - 1)))

    @property
    def threshold(self) -> int:
        return len(self.coefficients)

    @property
    def secret(self) -> Scalar:
        return self.coefficients[0]

    def evaluate(self, index: int) -> Scalar:
        """Horner 求值 / p(index) mod n, from the highest coefficient down."""
        x = Scalar(index)
        acc = Scalar.zero()
        for coeff in reversed(self.coefficients):
            acc = acc * x + coeff
        return acc

    def generate_shares(self, n: int) -> List[Share]:
        """Shares for indices 1..n; index 0 would reveal the secret and is never produced."""
        if n < self.threshold:
            raise InvalidInput(f"need at least {self.threshold} shares, got n={n}")
        return [Share(i, self.evaluate(i)) for i in range(1, n + 1)]


def _check_indices(indices: Sequence[int]) -> None:
    if not indices:
        raise InvalidInput("interpolation needs at least one share")
    if len(set(indices)) != len(indices):
        raise InvalidInput(f"duplicate share indices: {sorted(indices)}")
    if any(i < 1 for i in indices):
        raise InvalidInput("share indices must be >= 1")


def lagrange_coefficient(index: int, indices: Sequence[int]) -> Scalar:
    """λ_i(0) = ∏_{j≠i} j / (j − i) mod n."""
    numerator = Scalar.one()
    denominator = Scalar.one()
    for j in indices:
        if j == index:
            continue
        numerator = numerator * j
        denominator = denominator * (j - index)
    return numerator / denominator


def interpolate_at_zero(shares: Sequence[Share]) -> Scalar:
    """拉格朗日插值恢复秘密 / Recover p(0) from shares."""
    indices = [s.index for s in shares]
    _check_indices(indices)
    secret = Scalar.zero()
    for share in shares:
        secret = secret + share.value * lagrange_coefficient(share.index, indices)
    return secret


def interpolate_points_at_zero(points: Sequence[Tuple[int, CurvePoint]]) -> CurvePoint:
    """指数上的插值 / Recover p(0)·G from (index, p(index)·G) pairs."""
    indices = [i for i, _ in points]
    _check_indices(indices)
    return sum_points(point * lagrange_coefficient(i, indices) for i, point in points)
