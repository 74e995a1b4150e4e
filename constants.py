"""Shared constants for the PVSS engine.

secp256k1 域参数 / secp256k1 domain parameters (SEC 2 v2, §2.4.1).
"""

FIELD_PRIME: int = 0xFFFFFFFF_FFFFFFFF_FFFFFFFF_FFFFFFFF_FFFFFFFF_FFFFFFFF_FFFFFFFE_FFFFFC2F  # 坐标域素数 p
GROUP_ORDER: int = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141  # 生成元的阶 n

GENERATOR_X: int = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GENERATOR_Y: int = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8

CURVE_B: int = 7  # y² = x³ + 7

# p ≡ 3 (mod 4)，因此 β^((p+1)/4) 即为平方根
SQRT_EXPONENT: int = (FIELD_PRIME + 1) // 4

HASH_TO_POINT_MAX_ITERATIONS: int = 1000

SCALAR_BYTES: int = 32
POINT_BYTES: int = 2 * SCALAR_BYTES
PROOF_BYTES: int = 2 * SCALAR_BYTES + 4 * POINT_BYTES  # c, r, vG, vH, xG, xH
BUNDLE_ENTRY_BYTES: int = POINT_BYTES + PROOF_BYTES
INDEX_BYTES: int = 4
