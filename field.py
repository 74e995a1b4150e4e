"""Modular integer types: Scalar (mod group order) and FieldElement (mod field prime).

两种类型互不混用 / the two types never mix: arithmetic between a Scalar and a
FieldElement raises TypeError, so a reduction by the wrong modulus cannot
slip through.
"""

from __future__ import annotations

import operator
import secrets

from constants import FIELD_PRIME, GROUP_ORDER, SCALAR_BYTES
from errors import InvalidInput, ScalarArithmeticError


class _ModInt:
    """Shared implementation for integers modulo a fixed prime."""

    __slots__ = ("_v",)

    MODULUS: int = 0

    def __init__(self, value: int) -> None:
        if isinstance(value, _ModInt):
            raise TypeError(
                f"cannot build {type(self).__name__} from {type(value).__name__}; convert explicitly with int()"
            )
        if isinstance(value, bool):
            raise TypeError(f"cannot build {type(self).__name__} from bool")
        # operator.index 拒绝 float 等非整数类型，不做截断
        self._v = operator.index(value) % self.MODULUS

    @classmethod
    def zero(cls):
        return cls(0)

    @classmethod
    def one(cls):
        return cls(1)

    @classmethod
    def random(cls):
        """均匀采样于 [1, m-1] / Uniform non-zero element from the CSPRNG."""
        return cls(secrets.randbelow(cls.MODULUS - 1) + 1)

    @classmethod
    def from_bytes(cls, data: bytes):
        """Strict decoding of a 32-byte big-endian value below the modulus."""
        if len(data) != SCALAR_BYTES:
            raise InvalidInput(f"need {SCALAR_BYTES} bytes, got {len(data)}")
        value = int.from_bytes(data, "big")
        if value >= cls.MODULUS:
            raise InvalidInput(f"{cls.__name__} out of range")
        return cls(value)

    @classmethod
    def from_bytes_reduce(cls, data: bytes):
        """Reduce arbitrary-length big-endian bytes (hash output) modulo m."""
        return cls(int.from_bytes(data, "big"))

    def to_bytes(self) -> bytes:
        return self._v.to_bytes(SCALAR_BYTES, "big")

    @property
    def value(self) -> int:
        return self._v

    def is_zero(self) -> bool:
        return self._v == 0

    def _check(self, other) -> int:
        if type(other) is not type(self):
            raise TypeError(f"cannot combine {type(self).__name__} with {type(other).__name__}")
        return other._v

    def __add__(self, other):
        if isinstance(other, int):
            return type(self)(self._v + other)
        return type(self)(self._v + self._check(other))

    def __radd__(self, other):
        if isinstance(other, int):
            return type(self)(self._v + other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, int):
            return type(self)(self._v - other)
        return type(self)(self._v - self._check(other))

    def __rsub__(self, other):
        if isinstance(other, int):
            return type(self)(other - self._v)
        return NotImplemented

    def __mul__(self, other):
        if isinstance(other, int):
            return type(self)(self._v * other)
        if isinstance(other, _ModInt):
            return type(self)(self._v * self._check(other))
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, int):
            return type(self)(self._v * other)
        return NotImplemented

    def __neg__(self):
        return type(self)(-self._v)

    def __pow__(self, exponent: int):
        if exponent < 0:
            return self.inverse() ** (-exponent)
        return type(self)(pow(self._v, exponent, self.MODULUS))

    def __truediv__(self, other):
        return self * self._as_same(other).inverse()

    def _as_same(self, other):
        if isinstance(other, int):
            return type(self)(other)
        self._check(other)
        return other

    def inverse(self):
        """模逆元 / Multiplicative inverse via Fermat's little theorem."""
        if self._v == 0:
            raise ScalarArithmeticError(f"cannot invert zero {type(self).__name__}")
        return type(self)(pow(self._v, self.MODULUS - 2, self.MODULUS))

    def __eq__(self, other: object) -> bool:
        if type(other) is type(self):
            return self._v == other._v  # type: ignore[attr-defined]
        if isinstance(other, int) and not isinstance(other, bool):
            return self._v == other % self.MODULUS
        return NotImplemented

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._v))

    def __bool__(self) -> bool:
        return self._v != 0

    def __int__(self) -> int:
        return self._v

    def __repr__(self) -> str:
        h = hex(self._v)
        return f"{type(self).__name__}(0x{h[2:10]}…)" if len(h) > 14 else f"{type(self).__name__}({h})"


class Scalar(_ModInt):
    """Element of Z_n, n = secp256k1 group order: secrets, shares, nonces, responses."""

    __slots__ = ()

    MODULUS = GROUP_ORDER


class FieldElement(_ModInt):
    """Element of GF(p), p = secp256k1 field prime: point coordinates only."""

    __slots__ = ()

    MODULUS = FIELD_PRIME
