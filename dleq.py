"""Non-interactive Chaum–Pedersen DLEQ proofs (Fiat–Shamir over Keccak-256).

Proves knowledge of x with x_g = x·g and x_h = x·h without revealing x:

    v  ←$ Z_n                       (fresh per proof)
    c  = H(x_g ‖ x_h ‖ v_g ‖ v_h)   (fixed-width big-endian coordinates)
    r  = v − c·x  (mod n)

Verification recomputes r·g + c·x_g = v_g, r·h + c·x_h = v_h and the challenge.
The default base pair is (G, Y) with Y a node public key.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from concurrency import parallel_map
from curve import CurveContext, CurvePoint, default_context, keccak256
from data_models import DLEQProof, NodeRecord, Share
from errors import InvalidInput
from field import Scalar

logger = logging.getLogger(__name__)


def challenge(x_g: CurvePoint, x_h: CurvePoint, v_g: CurvePoint, v_h: CurvePoint) -> Scalar:
    return Scalar.from_bytes_reduce(keccak256(x_g.to_bytes(), x_h.to_bytes(), v_g.to_bytes(), v_h.to_bytes()))


def generate_proof(
    secret: Scalar,
    base_h: CurvePoint,
    base_g: CurvePoint | None = None,
    ctx: CurveContext | None = None,
) -> DLEQProof:
    """生成 DLEQ 证明 / Prove log_{base_g}(secret·base_g) == log_{base_h}(secret·base_h)."""
    if not isinstance(secret, Scalar):
        raise InvalidInput("DLEQ secret must be a Scalar")
    if base_h.is_infinity():
        raise InvalidInput("DLEQ base must not be the point at infinity")
    base_g = base_g or (ctx or default_context()).g

    x_g = base_g * secret
    x_h = base_h * secret

    # 随机承诺 v，每个证明独立采样，绝不复用
    v = Scalar.random()
    v_g = base_g * v
    v_h = base_h * v

    c = challenge(x_g, x_h, v_g, v_h)
    r = v - c * secret
    return DLEQProof(c=c, r=r, v_g=v_g, v_h=v_h, x_g=x_g, x_h=x_h)


def verify_proof(
    proof: DLEQProof,
    base_h: CurvePoint,
    base_g: CurvePoint | None = None,
    ctx: CurveContext | None = None,
) -> bool:
    """验证 DLEQ 证明 / Accept iff both response equations and the challenge hold."""
    if base_h.is_infinity():
        return False
    base_g = base_g or (ctx or default_context()).g

    if base_g * proof.r + proof.x_g * proof.c != proof.v_g:
        logger.debug("DLEQ check failed on base g")
        return False
    if base_h * proof.r + proof.x_h * proof.c != proof.v_h:
        logger.debug("DLEQ check failed on base h")
        return False
    if challenge(proof.x_g, proof.x_h, proof.v_g, proof.v_h) != proof.c:
        logger.debug("DLEQ challenge mismatch")
        return False
    return True


def batch_prove(
    nodes: Sequence[NodeRecord],
    shares: Sequence[Share],
    max_workers: int | None = None,
    ctx: CurveContext | None = None,
) -> List[DLEQProof]:
    """One proof per (node, share) pair, bases (G, node public key)."""
    if len(nodes) != len(shares):
        raise InvalidInput(f"{len(nodes)} nodes but {len(shares)} shares")
    ctx = ctx or default_context()
    pairs = list(zip(nodes, shares))

    def prove(pair: Tuple[NodeRecord, Share]) -> DLEQProof:
        node, share = pair
        return generate_proof(share.value, node.public_key, ctx.g)

    return parallel_map(prove, pairs, max_workers)


def batch_verify(
    proofs: Sequence[DLEQProof],
    bases: Sequence[CurvePoint],
    max_workers: int | None = None,
    ctx: CurveContext | None = None,
) -> List[bool]:
    """Verify proofs[i] against bases (G, bases[i]); result order matches input."""
    if len(proofs) != len(bases):
        raise InvalidInput(f"{len(proofs)} proofs but {len(bases)} bases")
    ctx = ctx or default_context()

    def check(pair: Tuple[DLEQProof, CurvePoint]) -> bool:
        proof, base = pair
        return verify_proof(proof, base, ctx.g)

    return parallel_map(check, list(zip(proofs, bases)), max_workers)
