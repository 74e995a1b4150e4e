"""Core PVSS protocol: dealing, public verification, decryption and reconstruction."""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Sequence

from commitment import commit, verify_share_point
from concurrency import parallel_map
from config import PVSSConfig
from constants import HASH_TO_POINT_MAX_ITERATIONS
from curve import CurveContext, CurvePoint, default_context
from data_models import (
    DecryptedShare,
    DLEQProof,
    EncryptedShare,
    NodeRecord,
    PerformanceStats,
    ShareBundle,
)
from dleq import generate_proof, verify_proof
from errors import InvalidInput, InvalidProof
from field import Scalar
from polynomial import Polynomial, interpolate_points_at_zero

logger = logging.getLogger(__name__)


def _check_nodes(nodes: Sequence[NodeRecord], threshold: int) -> None:
    n = len(nodes)
    if n == 0:
        raise InvalidInput("node list is empty")
    if not 1 <= threshold <= n:
        raise InvalidInput(f"threshold must satisfy 1 <= t <= n, got t={threshold}, n={n}")
    # 份额 i 分配给列表中第 i 个节点，因此索引必须稠密且有序
    indices = [node.index for node in nodes]
    if indices != list(range(1, n + 1)):
        raise InvalidInput(f"node indices must be 1..{n} in order, got {indices}")


def encrypt_shares(
    secret: Scalar,
    nodes: Sequence[NodeRecord],
    threshold: int,
    ctx: CurveContext | None = None,
    max_workers: int | None = None,
) -> ShareBundle:
    """分发者生成广播份额包 / Deal ``secret`` to ``nodes`` as a publicly verifiable bundle."""
    if not isinstance(secret, Scalar):
        raise InvalidInput("secret must be a Scalar")
    _check_nodes(nodes, threshold)
    ctx = ctx or default_context()

    poly = Polynomial.random(secret, threshold)
    shares = poly.generate_shares(len(nodes))
    commitments = commit(poly, ctx)

    def encrypt(i: int) -> tuple:
        node, share = nodes[i], shares[i]
        # 证明中的 x_h = share·Y 即加密份额本身
        proof = generate_proof(share.value, node.public_key, ctx.g)
        return EncryptedShare(node.index, proof.x_h), proof

    entries = parallel_map(encrypt, list(range(len(nodes))), max_workers)
    logger.debug("dealt %d encrypted shares with threshold %d", len(entries), threshold)
    return ShareBundle(commitments=commitments, entries=tuple(entries))


def _entry_is_valid(
    node: NodeRecord,
    encrypted_share: EncryptedShare,
    proof: DLEQProof,
    commitments: Sequence[CurvePoint],
    ctx: CurveContext,
) -> bool:
    if encrypted_share.index != node.index:
        return False
    if proof.x_h != encrypted_share.point:
        return False
    if not verify_proof(proof, node.public_key, ctx.g):
        return False
    # x_g = share·G 必须与 Feldman 承诺一致
    return verify_share_point(node.index, proof.x_g, commitments)


def find_invalid_shares(
    bundle: ShareBundle,
    nodes: Sequence[NodeRecord],
    ctx: CurveContext | None = None,
    max_workers: int | None = None,
) -> List[int]:
    """Indices of nodes whose encrypted share fails public verification."""
    if len(nodes) != bundle.node_count:
        raise InvalidInput(f"{len(nodes)} nodes but bundle carries {bundle.node_count} shares")
    if bundle.threshold < 1 or bundle.threshold > bundle.node_count:
        raise InvalidInput(f"bundle threshold {bundle.threshold} invalid for {bundle.node_count} nodes")
    ctx = ctx or default_context()

    def check(i: int) -> bool:
        encrypted_share, proof = bundle.entries[i]
        return _entry_is_valid(nodes[i], encrypted_share, proof, bundle.commitments, ctx)

    results = parallel_map(check, list(range(len(nodes))), max_workers)
    invalid = sorted(node.index for node, ok in zip(nodes, results) if not ok)
    if invalid:
        logger.warning("bundle verification failed for nodes %s", invalid)
    return invalid


def verify_bundle(
    bundle: ShareBundle,
    nodes: Sequence[NodeRecord],
    ctx: CurveContext | None = None,
    max_workers: int | None = None,
) -> None:
    """公开验证 / Raise InvalidProof naming the first node whose share does not verify."""
    invalid = find_invalid_shares(bundle, nodes, ctx, max_workers)
    if invalid:
        raise InvalidProof(f"encrypted share for node {invalid[0]} failed verification", index=invalid[0])


def decrypt_share(
    node: NodeRecord,
    private_key: Scalar,
    encrypted_share: EncryptedShare,
    proof: DLEQProof,
    commitments: Sequence[CurvePoint],
    ctx: CurveContext | None = None,
) -> DecryptedShare:
    """节点侧验证并解密份额 / Verify, decrypt and re-prove this node's share.

    Returns value·G for the node together with a DLEQ proof over bases
    (G, P) showing that P = d⁻¹·S was computed with the key behind the
    node's public key.
    """
    ctx = ctx or default_context()
    if not isinstance(private_key, Scalar):
        raise InvalidInput("private key must be a Scalar")
    if encrypted_share.index != node.index:
        raise InvalidInput(f"encrypted share {encrypted_share.index} is not addressed to node {node.index}")

    if proof.x_h != encrypted_share.point or not verify_proof(proof, node.public_key, ctx.g):
        raise InvalidProof(f"dealer proof for node {node.index} does not verify", index=node.index)

    point = encrypted_share.point * private_key.inverse()

    if not verify_share_point(node.index, point, commitments):
        raise InvalidProof(f"decrypted share for node {node.index} does not match commitments", index=node.index)

    # 证明 log_G(Y) == log_P(S)，即解密使用了正确的私钥
    decryption_proof = generate_proof(private_key, point, ctx.g)
    return DecryptedShare(index=node.index, point=point, proof=decryption_proof)


def verify_decrypted_share(
    decrypted: DecryptedShare,
    node: NodeRecord,
    encrypted_share: EncryptedShare,
    commitments: Sequence[CurvePoint],
    ctx: CurveContext | None = None,
) -> bool:
    """Accept another node's decrypted share without trusting that node."""
    ctx = ctx or default_context()
    proof = decrypted.proof
    if not decrypted.index == node.index == encrypted_share.index:
        return False
    if proof.x_g != node.public_key or proof.x_h != encrypted_share.point:
        return False
    if decrypted.point.is_infinity() or not verify_proof(proof, decrypted.point, ctx.g):
        return False
    return verify_share_point(decrypted.index, decrypted.point, commitments)


def reconstruct_public_secret(decrypted_shares: Sequence[DecryptedShare], threshold: int) -> CurvePoint:
    """指数上的拉格朗日插值 / secret·G from at least ``threshold`` decrypted shares."""
    if threshold < 1:
        raise InvalidInput(f"threshold must be >= 1, got {threshold}")
    # 按节点序号去重；同一序号的两个份额点必须一致
    distinct: Dict[int, CurvePoint] = {}
    for share in decrypted_shares:
        seen = distinct.setdefault(share.index, share.point)
        if seen != share.point:
            raise InvalidInput(f"conflicting decrypted shares for node {share.index}")
    if len(distinct) < threshold:
        raise InvalidInput(f"need {threshold} distinct decrypted shares, got {len(distinct)}")
    chosen = sorted(distinct.items())[:threshold]
    return interpolate_points_at_zero(chosen)


class PVSS:
    """PVSS 会话封装 / Runs the engine for fixed (n, t) and records per-phase timing."""

    def __init__(
        self,
        n: int,
        t: int,
        ctx: CurveContext | None = None,
        max_workers: int | None = None,
    ):
        if not 1 <= t <= n:
            raise InvalidInput(f"threshold must satisfy 1 <= t <= n, got t={t}, n={n}")
        self.n = n
        self.t = t
        self.ctx = ctx or default_context()
        self.max_workers = max_workers
        self.performance_stats: List[PerformanceStats] = []

    @classmethod
    def from_config(cls, config: PVSSConfig, ctx: CurveContext | None = None) -> "PVSS":
        config.validate()
        if ctx is None and config.hash_to_point_max_iterations != HASH_TO_POINT_MAX_ITERATIONS:
            ctx = CurveContext.secp256k1(config.hash_to_point_max_iterations)
        return cls(config.number_of_nodes, config.threshold, ctx=ctx, max_workers=config.max_workers)

    def add_performance_stat(
        self,
        phase_name: str,
        duration: float,
        operations: Dict[str, int] | None = None,
        node_index: int | None = None,
    ) -> None:
        stat = PerformanceStats(phase_name, duration, operations or {}, node_index)
        self.performance_stats.append(stat)

    def print_performance_report(self) -> None:
        """打印会话计时报告 / Dealer and verifier phases, then one decryption row per node."""
        print("\n" + "=" * 80)
        print(f"***  PVSS SESSION TIMING (N={self.n}, T={self.t})  ***".center(80))
        print("=" * 80 + "\n")

        public = [stat for stat in self.performance_stats if stat.node_index is None]
        per_node = [stat for stat in self.performance_stats if stat.node_index is not None]
        total_time = sum(stat.duration for stat in self.performance_stats)

        print(f"  {'Public phase':<34}{'ms':>12}{'% of session':>16}")
        print(f"  {'-' * 62}")
        for stat in public:
            share = (stat.duration / total_time * 100) if total_time > 0 else 0
            print(f"  {stat.phase_name:<34}{stat.duration * 1000:>12.3f}{share:>15.1f}%")
            for op_name, count in stat.operations.items():
                print(f"      · {op_name}: {count:,}")

        if per_node:
            decrypt_total = sum(stat.duration for stat in per_node)
            mean = decrypt_total / len(per_node)
            slowest = max(per_node, key=lambda stat: stat.duration)
            print(f"\n  {'Node':<8}{'decrypt ms':>14}{'vs mean':>12}")
            print(f"  {'-' * 34}")
            for stat in sorted(per_node, key=lambda stat: stat.node_index):
                ratio = stat.duration / mean if mean > 0 else 0
                print(f"  {stat.node_index:<8}{stat.duration * 1000:>14.3f}{ratio:>11.2f}x")
            print(f"  slowest: node {slowest.node_index}, {len(per_node)}/{self.n} nodes decrypted")

        print("\n" + "=" * 80)
        print(f"TOTAL SESSION TIME: {total_time * 1000:.3f} ms")
        print("=" * 80 + "\n")

    def _check_node_count(self, nodes: Sequence[NodeRecord]) -> None:
        if len(nodes) != self.n:
            raise InvalidInput(f"expected {self.n} nodes, got {len(nodes)}")

    def share_secret(self, secret: Scalar, nodes: Sequence[NodeRecord]) -> ShareBundle:
        self._check_node_count(nodes)
        start_time = time.time()
        bundle = encrypt_shares(secret, nodes, self.t, self.ctx, self.max_workers)
        self.add_performance_stat("Share distribution", time.time() - start_time, {
            "Polynomial evaluations (Horner, one per node)": self.n,
            "Commitment scalar multiplications (C_k = a_k·G)": self.t,
            "Share encryptions (s_i·Y_i)": self.n,
            "DLEQ proofs (4 scalar multiplications each)": self.n,
        })
        return bundle

    def verify_bundle(self, bundle: ShareBundle, nodes: Sequence[NodeRecord]) -> List[int]:
        """Returns the indices that failed; an empty list means the whole bundle verified."""
        self._check_node_count(nodes)
        start_time = time.time()
        invalid = find_invalid_shares(bundle, nodes, self.ctx, self.max_workers)
        self.add_performance_stat("Public bundle verification", time.time() - start_time, {
            "DLEQ verifications": self.n,
            "Feldman checks (t scalar multiplications each)": self.n,
            "Rejected shares": len(invalid),
        })
        return invalid

    def decrypt_share(self, node: NodeRecord, private_key: Scalar, bundle: ShareBundle) -> DecryptedShare:
        start_time = time.time()
        encrypted_share, proof = bundle.entry_for(node.index)
        decrypted = decrypt_share(node, private_key, encrypted_share, proof, bundle.commitments, self.ctx)
        self.add_performance_stat(f"Share decryption (node {node.index})", time.time() - start_time, {
            "DLEQ verifications": 1,
            "Modular inverses (d⁻¹ mod n)": 1,
            "Feldman checks": 1,
            "DLEQ proofs (decryption)": 1,
        }, node_index=node.index)
        return decrypted

    def reconstruct(self, decrypted_shares: Sequence[DecryptedShare]) -> CurvePoint:
        start_time = time.time()
        public_secret = reconstruct_public_secret(decrypted_shares, self.t)
        self.add_performance_stat("Public secret reconstruction", time.time() - start_time, {
            "Lagrange coefficients": self.t,
            "Scalar multiplications (λ_i·P_i)": self.t,
        })
        return public_secret
