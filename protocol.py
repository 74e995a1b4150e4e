"""High-level orchestration for running the PVSS demo."""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Dict, List, Tuple

import numpy as np

from config import PVSSConfig, configure_logging
from crypto_manager import CryptoManager
from curve import CurvePoint
from data_models import DecryptedShare, NodeRecord, ShareBundle
from errors import InvalidProof
from field import Scalar
from pvss_core import PVSS


def _corrupt_entry(bundle: ShareBundle, index: int) -> ShareBundle:
    """篡改指定节点的加密份额 / Replace one node's encrypted share to simulate a faulty dealer."""
    entries = []
    for encrypted_share, proof in bundle.entries:
        if encrypted_share.index == index:
            bogus = encrypted_share.point + CurvePoint.generator()
            encrypted_share = replace(encrypted_share, point=bogus)
            proof = replace(proof, x_h=bogus)
        entries.append((encrypted_share, proof))
    return replace(bundle, entries=tuple(entries))


def run_pvss_demo(
    config: PVSSConfig | None = None,
    secret: Scalar | None = None,
    faulty_node: int | None = None,
) -> Dict[str, object]:
    """运行 PVSS 演示，覆盖份额分发、公开验证、解密与重构全流程."""
    config = config or PVSSConfig()
    config.validate()
    secret = secret if secret is not None else Scalar.random()

    print("\n" + "=" * 80)
    print("***  PUBLICLY VERIFIABLE SECRET SHARING DEMO  ***".center(80))
    print("=" * 80 + "\n")

    print("*** Protocol Parameters ***")
    print(f"  • Number of nodes (N):        {config.number_of_nodes}")
    print(f"  • Threshold (T):              {config.threshold}")
    print(f"  • Curve:                      secp256k1")
    print(f"  • Challenge hash:             Keccak-256")
    print(f"  • Worker pool:                {config.max_workers or 'default'}")
    print("-" * 80 + "\n")

    pvss = PVSS.from_config(config)

    # —— 节点注册：生成密钥对 ——
    keys: Dict[int, Scalar] = {}
    nodes: List[NodeRecord] = []
    for i in range(1, config.number_of_nodes + 1):
        private_key, record = CryptoManager.generate_node_keypair(i)
        keys[i] = private_key
        nodes.append(record)
    dealer_key, dealer = CryptoManager.generate_node_keypair(1)

    # —— 阶段1：分发者生成并签名份额包 ——
    bundle = pvss.share_secret(secret, nodes)
    if faulty_node is not None:
        bundle = _corrupt_entry(bundle, faulty_node)
    signature = CryptoManager.sign_bundle(bundle, dealer_key)
    print(f"  Dealer: ✓ Bundle with {bundle.node_count} encrypted shares and {bundle.threshold} commitments")

    # —— 阶段2：公开验证 ——
    signature_ok = CryptoManager.verify_bundle_signature(signature, bundle, dealer.public_key)
    invalid = pvss.verify_bundle(bundle, nodes)
    print(f"  Verifier: {'✓' if signature_ok else '✗'} Dealer signature")
    if invalid:
        print(f"\n  ⚠️  Complaint Summary:")
        for index in invalid:
            print(f"     - Node {index}: encrypted share failed DLEQ/Feldman verification")
    else:
        print(f"  Verifier: ✓ All {len(nodes)} DLEQ proofs and Feldman checks passed")

    # —— 阶段3：各节点解密自己的份额 ——
    print("\n" + "=" * 80)
    print("***  SHARE DECRYPTION  ***".center(80))
    print("=" * 80 + "\n")

    decrypted: List[DecryptedShare] = []
    decrypt_times: List[float] = []
    for node in nodes:
        start_time = time.time()
        try:
            share = pvss.decrypt_share(node, keys[node.index], bundle)
        except InvalidProof as exc:
            print(f"  Node {node.index}: ✗ {exc}")
            continue
        decrypt_times.append(time.time() - start_time)
        decrypted.append(share)
        print(f"  Node {node.index}: ✓ Decrypted share point, proof attached")

    # —— 阶段4：指数上的重构 ——
    print("\n" + "=" * 80)
    print("***  PUBLIC SECRET RECONSTRUCTION  ***".center(80))
    print("=" * 80 + "\n")

    expected = pvss.ctx.mul_g(secret)
    reconstructed: CurvePoint | None = None
    if len(decrypted) >= config.threshold:
        reconstructed = pvss.reconstruct(decrypted)
        match = reconstructed == expected
        print(f"  {'✓' if match else '✗'} Reconstructed secret·G from {config.threshold} decrypted shares")
    else:
        match = False
        print(f"  ✗ Only {len(decrypted)} decrypted shares, threshold is {config.threshold}")

    if decrypt_times:
        # 汇总各节点解密耗时
        times: Tuple[float, float] = (float(np.mean(decrypt_times)), float(np.max(decrypt_times)))
        print(f"\n  ⏱  Decryption time: mean {times[0]*1000:.2f} ms, max {times[1]*1000:.2f} ms")

    pvss.print_performance_report()

    return {
        "signature_ok": signature_ok,
        "invalid_nodes": invalid,
        "decrypted_nodes": [share.index for share in decrypted],
        "reconstructed_matches": match,
    }


if __name__ == "__main__":
    demo_config = PVSSConfig.from_env()
    configure_logging(demo_config.log_level)
    run_pvss_demo(demo_config)
