"""secp256k1 points, the immutable curve context and hash-to-curve.

Group arithmetic is delegated to the ``ecdsa`` package; this module only
wraps its points into an immutable (x, y) value type built on FieldElement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

from Crypto.Hash import keccak
from ecdsa import SECP256k1
from ecdsa.ellipticcurve import INFINITY, PointJacobi

from constants import (
    CURVE_B,
    FIELD_PRIME,
    GENERATOR_X,
    GENERATOR_Y,
    GROUP_ORDER,
    HASH_TO_POINT_MAX_ITERATIONS,
    POINT_BYTES,
    SCALAR_BYTES,
    SQRT_EXPONENT,
)
from errors import CurveError, HashToPointExhausted, InvalidInput
from field import FieldElement, Scalar

logger = logging.getLogger(__name__)

_CURVE = SECP256k1.curve
_GENERATOR = SECP256k1.generator


def keccak256(*chunks: bytes) -> bytes:
    """Keccak-256（以太坊版本，非 NIST SHA3）/ Keccak-256 over the concatenation of ``chunks``."""
    digest = keccak.new(digest_bits=256)
    for chunk in chunks:
        digest.update(chunk)
    return digest.digest()


@dataclass(frozen=True)
class CurvePoint:
    """Affine point on y² = x³ + 7 over GF(p).

    The point at infinity is stored as (0, 0), which is not on the curve.
    """

    x: FieldElement
    y: FieldElement

    @classmethod
    def from_affine(cls, x: int, y: int) -> "CurvePoint":
        """Build a point from integer coordinates, rejecting anything off-curve."""
        if not (0 <= x < FIELD_PRIME and 0 <= y < FIELD_PRIME):
            raise CurveError("coordinate outside the field")
        if x == 0 and y == 0:
            return cls.infinity()
        if not _CURVE.contains_point(x, y):
            raise CurveError(f"point (0x{x:064x}, 0x{y:064x}) is not on secp256k1")
        return cls(FieldElement(x), FieldElement(y))

    @classmethod
    def from_bytes(cls, data: bytes) -> "CurvePoint":
        if len(data) != POINT_BYTES:
            raise CurveError(f"point encoding must be {POINT_BYTES} bytes, got {len(data)}")
        x = int.from_bytes(data[:SCALAR_BYTES], "big")
        y = int.from_bytes(data[SCALAR_BYTES:], "big")
        return cls.from_affine(x, y)

    @classmethod
    def infinity(cls) -> "CurvePoint":
        return cls(FieldElement.zero(), FieldElement.zero())

    @classmethod
    def generator(cls) -> "CurvePoint":
        return cls(FieldElement(GENERATOR_X), FieldElement(GENERATOR_Y))

    def to_bytes(self) -> bytes:
        return self.x.to_bytes() + self.y.to_bytes()

    def is_infinity(self) -> bool:
        return self.x.is_zero() and self.y.is_zero()

    def is_on_curve(self) -> bool:
        """检查曲线方程 / Check y² ≡ x³ + 7 (mod p)."""
        if self.is_infinity():
            return False
        return self.y ** 2 == self.x ** 3 + CURVE_B

    # —— 与 ecdsa 库之间的转换 ——

    def _to_ecdsa(self):
        if self.is_infinity():
            return INFINITY
        if self.x == GENERATOR_X and self.y == GENERATOR_Y:
            # 使用库内带预计算表的生成元
            return _GENERATOR
        return PointJacobi(_CURVE, self.x.value, self.y.value, 1, GROUP_ORDER)

    @classmethod
    def _from_ecdsa(cls, point) -> "CurvePoint":
        if point == INFINITY:
            return cls.infinity()
        return cls(FieldElement(point.x()), FieldElement(point.y()))

    # —— 群运算 ——

    def __add__(self, other: "CurvePoint") -> "CurvePoint":
        if not isinstance(other, CurvePoint):
            return NotImplemented
        if self.is_infinity():
            return other
        if other.is_infinity():
            return self
        if self.x == other.x and self.y != other.y:
            return CurvePoint.infinity()
        return CurvePoint._from_ecdsa(self._to_ecdsa() + other._to_ecdsa())

    def __neg__(self) -> "CurvePoint":
        if self.is_infinity():
            return self
        return CurvePoint(self.x, -self.y)

    def __sub__(self, other: "CurvePoint") -> "CurvePoint":
        if not isinstance(other, CurvePoint):
            return NotImplemented
        return self + (-other)

    def __mul__(self, k: Scalar) -> "CurvePoint":
        if not isinstance(k, Scalar):
            return NotImplemented
        if k.is_zero() or self.is_infinity():
            return CurvePoint.infinity()
        return CurvePoint._from_ecdsa(self._to_ecdsa() * k.value)

    __rmul__ = __mul__

    def __repr__(self) -> str:
        if self.is_infinity():
            return "CurvePoint(infinity)"
        return f"CurvePoint(x=0x{self.x.value:064x}, y=0x{self.y.value:064x})"


def sum_points(points: Iterable[CurvePoint]) -> CurvePoint:
    acc = CurvePoint.infinity()
    for point in points:
        acc = acc + point
    return acc


def hash_to_point(data: bytes, max_iterations: int = HASH_TO_POINT_MAX_ITERATIONS) -> CurvePoint:
    """将任意字节映射到曲线点 / Deterministically map bytes to a secp256k1 point.

    Try-and-increment: x = Keccak256(data) mod p, then step x by one until
    x³ + 7 is a square. The candidate root β^((p+1)/4) is only valid because
    p ≡ 3 (mod 4); it is checked before returning.

    Raises HashToPointExhausted after ``max_iterations`` candidates.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidInput("hash_to_point expects bytes")
    x = FieldElement.from_bytes_reduce(keccak256(bytes(data)))
    for _ in range(max_iterations):
        beta = x ** 3 + CURVE_B
        y = beta ** SQRT_EXPONENT
        if y ** 2 == beta:
            return CurvePoint(x, y)
        x = x + 1
    raise HashToPointExhausted(max_iterations)


@dataclass(frozen=True)
class CurveContext:
    """不可变的群参数 / Immutable group parameters shared read-only by every component."""

    field_prime: int
    group_order: int
    g: CurvePoint
    h: CurvePoint

    @classmethod
    def secp256k1(cls, max_iterations: int = HASH_TO_POINT_MAX_ITERATIONS) -> "CurveContext":
        g = CurvePoint.generator()
        # H = hashToPoint(G.x)，其相对 G 的离散对数未知
        h = hash_to_point(g.x.to_bytes(), max_iterations)
        logger.debug("derived secondary generator H=%r", h)
        return cls(field_prime=FIELD_PRIME, group_order=GROUP_ORDER, g=g, h=h)

    def mul_g(self, k: Scalar) -> CurvePoint:
        return self.g * k


@lru_cache(maxsize=None)
def default_context() -> CurveContext:
    """Process-wide secp256k1 context, built once."""
    return CurveContext.secp256k1()
