"""Dataclasses shared across the PVSS engine.

所有会话对象均为不可变值 / every session object is an immutable value,
created once per secret-sharing session and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from curve import CurvePoint
from errors import InvalidInput
from field import Scalar


@dataclass(frozen=True)
class Share:
    """份额 / Polynomial evaluated at a node index."""

    index: int
    value: Scalar

    def __post_init__(self) -> None:
        if self.index < 1:
            raise InvalidInput(f"share index must be >= 1, got {self.index}")


@dataclass(frozen=True)
class NodeRecord:
    """节点记录 / Node index and public key, owned by the node registry."""

    index: int
    public_key: CurvePoint

    def __post_init__(self) -> None:
        if self.index < 1:
            raise InvalidInput(f"node index must be >= 1, got {self.index}")


@dataclass(frozen=True)
class EncryptedShare:
    """加密份额 / share.value · node public key."""

    index: int
    point: CurvePoint


@dataclass(frozen=True)
class DLEQProof:
    """离散对数相等证明 / Chaum–Pedersen proof that log_g(x_g) == log_h(x_h)."""

    c: Scalar
    r: Scalar
    v_g: CurvePoint
    v_h: CurvePoint
    x_g: CurvePoint
    x_h: CurvePoint


@dataclass(frozen=True)
class ShareBundle:
    """广播份额包 / Commitments plus one (encrypted share, proof) pair per node."""

    commitments: Tuple[CurvePoint, ...]
    entries: Tuple[Tuple[EncryptedShare, DLEQProof], ...]

    @property
    def threshold(self) -> int:
        return len(self.commitments)

    @property
    def node_count(self) -> int:
        return len(self.entries)

    def entry_for(self, index: int) -> Tuple[EncryptedShare, DLEQProof]:
        for encrypted_share, proof in self.entries:
            if encrypted_share.index == index:
                return encrypted_share, proof
        raise InvalidInput(f"bundle has no entry for node {index}")


@dataclass(frozen=True)
class DecryptedShare:
    """解密份额 / Public share point value·G with a proof of correct decryption."""

    index: int
    point: CurvePoint
    proof: DLEQProof


@dataclass
class PerformanceStats:
    """性能统计数据类 / Timing and operation counts for one protocol phase."""

    phase_name: str
    duration: float
    operations: Dict[str, int] = field(default_factory=dict)
    node_index: Optional[int] = None  # 仅节点本地阶段（解密）携带
