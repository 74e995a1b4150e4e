"""Fixed-width wire encoding for scalars, points, proofs and bundles.

    Scalar / FieldElement   32 bytes, big-endian
    CurvePoint              64 bytes, x ‖ y (infinity = 64 zero bytes)
    DLEQProof              320 bytes, c ‖ r ‖ v_g ‖ v_h ‖ x_g ‖ x_h
    ShareBundle            t × 64 commitment bytes, then n × (64 + 320)
    DecryptedShare         4-byte index ‖ 64-byte point ‖ 320-byte proof

Bundle entries carry no explicit index: entry i belongs to node i + 1.
"""

from __future__ import annotations

from typing import List

from constants import BUNDLE_ENTRY_BYTES, INDEX_BYTES, POINT_BYTES, PROOF_BYTES, SCALAR_BYTES
from curve import CurvePoint
from data_models import DecryptedShare, DLEQProof, EncryptedShare, ShareBundle
from errors import InvalidInput
from field import Scalar


def encode_scalar(value: Scalar) -> bytes:
    return value.to_bytes()


def decode_scalar(data: bytes) -> Scalar:
    return Scalar.from_bytes(data)


def encode_point(point: CurvePoint) -> bytes:
    return point.to_bytes()


def decode_point(data: bytes) -> CurvePoint:
    return CurvePoint.from_bytes(data)


def encode_proof(proof: DLEQProof) -> bytes:
    return b"".join([
        encode_scalar(proof.c),
        encode_scalar(proof.r),
        encode_point(proof.v_g),
        encode_point(proof.v_h),
        encode_point(proof.x_g),
        encode_point(proof.x_h),
    ])


def decode_proof(data: bytes) -> DLEQProof:
    if len(data) != PROOF_BYTES:
        raise InvalidInput(f"proof encoding must be {PROOF_BYTES} bytes, got {len(data)}")
    c = decode_scalar(data[:SCALAR_BYTES])
    r = decode_scalar(data[SCALAR_BYTES:2 * SCALAR_BYTES])
    offset = 2 * SCALAR_BYTES
    points: List[CurvePoint] = []
    for _ in range(4):
        points.append(decode_point(data[offset:offset + POINT_BYTES]))
        offset += POINT_BYTES
    v_g, v_h, x_g, x_h = points
    return DLEQProof(c=c, r=r, v_g=v_g, v_h=v_h, x_g=x_g, x_h=x_h)


def encode_bundle(bundle: ShareBundle) -> bytes:
    parts = [encode_point(c) for c in bundle.commitments]
    for position, (encrypted_share, proof) in enumerate(bundle.entries, 1):
        if encrypted_share.index != position:
            raise InvalidInput(f"bundle entry {position} carries index {encrypted_share.index}")
        parts.append(encode_point(encrypted_share.point))
        parts.append(encode_proof(proof))
    return b"".join(parts)


def decode_bundle(data: bytes, threshold: int) -> ShareBundle:
    """解码份额包 / The node count follows from the length once the threshold is known."""
    if threshold < 1:
        raise InvalidInput(f"threshold must be >= 1, got {threshold}")
    header = threshold * POINT_BYTES
    body = len(data) - header
    if body <= 0 or body % BUNDLE_ENTRY_BYTES:
        raise InvalidInput(f"bundle length {len(data)} does not match threshold {threshold}")
    n = body // BUNDLE_ENTRY_BYTES
    if threshold > n:
        raise InvalidInput(f"bundle threshold {threshold} exceeds node count {n}")

    commitments = tuple(
        decode_point(data[k * POINT_BYTES:(k + 1) * POINT_BYTES]) for k in range(threshold)
    )
    entries = []
    offset = header
    for index in range(1, n + 1):
        point = decode_point(data[offset:offset + POINT_BYTES])
        proof = decode_proof(data[offset + POINT_BYTES:offset + BUNDLE_ENTRY_BYTES])
        entries.append((EncryptedShare(index, point), proof))
        offset += BUNDLE_ENTRY_BYTES
    return ShareBundle(commitments=commitments, entries=tuple(entries))


def encode_decrypted_share(share: DecryptedShare) -> bytes:
    return share.index.to_bytes(INDEX_BYTES, "big") + encode_point(share.point) + encode_proof(share.proof)


def decode_decrypted_share(data: bytes) -> DecryptedShare:
    expected = INDEX_BYTES + POINT_BYTES + PROOF_BYTES
    if len(data) != expected:
        raise InvalidInput(f"decrypted share encoding must be {expected} bytes, got {len(data)}")
    index = int.from_bytes(data[:INDEX_BYTES], "big")
    if index < 1:
        raise InvalidInput("decrypted share index must be >= 1")
    point = decode_point(data[INDEX_BYTES:INDEX_BYTES + POINT_BYTES])
    proof = decode_proof(data[INDEX_BYTES + POINT_BYTES:])
    return DecryptedShare(index=index, point=point, proof=proof)
