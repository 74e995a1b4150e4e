"""Node key management and dealer bundle signatures on secp256k1."""

from __future__ import annotations

from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from curve import CurvePoint
from data_models import NodeRecord, ShareBundle
from errors import InvalidInput
from field import Scalar
from wire import encode_bundle


class CryptoManager:
    """密钥管理器，处理节点密钥生成与份额包签名 / Node keys and bundle signatures."""

    CURVE = ec.SECP256K1()

    @staticmethod
    def _private_key(private_scalar: Scalar) -> ec.EllipticCurvePrivateKey:
        if private_scalar.is_zero():
            raise InvalidInput("private key must be non-zero")
        return ec.derive_private_key(private_scalar.value, CryptoManager.CURVE)

    @staticmethod
    def _public_point(public_key: ec.EllipticCurvePublicKey) -> CurvePoint:
        numbers = public_key.public_numbers()
        return CurvePoint.from_affine(numbers.x, numbers.y)

    @staticmethod
    def generate_node_keypair(index: int) -> Tuple[Scalar, NodeRecord]:
        """生成节点密钥对 / Fresh secp256k1 key pair; the record holds d·G."""
        private_key = ec.generate_private_key(CryptoManager.CURVE)
        private_scalar = Scalar(private_key.private_numbers().private_value)
        return private_scalar, NodeRecord(index, CryptoManager._public_point(private_key.public_key()))

    @staticmethod
    def node_record_from_private_key(index: int, private_scalar: Scalar) -> NodeRecord:
        private_key = CryptoManager._private_key(private_scalar)
        return NodeRecord(index, CryptoManager._public_point(private_key.public_key()))

    @staticmethod
    def sign_bundle(bundle: ShareBundle, private_scalar: Scalar) -> bytes:
        """分发者对份额包签名 / ECDSA-SHA256 signature over the bundle's wire encoding."""
        private_key = CryptoManager._private_key(private_scalar)
        return private_key.sign(encode_bundle(bundle), ec.ECDSA(hashes.SHA256()))

    @staticmethod
    def verify_bundle_signature(signature: bytes, bundle: ShareBundle, public_key: CurvePoint) -> bool:
        """验证份额包签名，返回是否有效."""
        if public_key.is_infinity():
            return False
        verifier = ec.EllipticCurvePublicNumbers(
            public_key.x.value, public_key.y.value, CryptoManager.CURVE
        ).public_key()
        try:
            verifier.verify(signature, encode_bundle(bundle), ec.ECDSA(hashes.SHA256()))
            return True
        except InvalidSignature:
            return False
