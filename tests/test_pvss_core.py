# tests/test_pvss_core.py
# Dealing, public verification, decryption and reconstruction.

import itertools
from dataclasses import replace

import pytest

from config import PVSSConfig
from curve import CurvePoint
from data_models import NodeRecord
from dleq import verify_proof
from errors import InvalidInput, InvalidProof, ScalarArithmeticError
from field import Scalar
from pvss_core import (
    PVSS,
    decrypt_share,
    encrypt_shares,
    find_invalid_shares,
    reconstruct_public_secret,
    verify_bundle,
    verify_decrypted_share,
)


def decrypt_all(bundle, keys, nodes):
    decrypted = []
    for node in nodes:
        encrypted_share, proof = bundle.entry_for(node.index)
        decrypted.append(decrypt_share(node, keys[node.index], encrypted_share, proof, bundle.commitments))
    return decrypted


def corrupt(bundle, index):
    entries = []
    for encrypted_share, proof in bundle.entries:
        if encrypted_share.index == index:
            bogus = encrypted_share.point + CurvePoint.generator()
            encrypted_share = replace(encrypted_share, point=bogus)
            proof = replace(proof, x_h=bogus)
        entries.append((encrypted_share, proof))
    return replace(bundle, entries=tuple(entries))


def test_end_to_end_secret_42(ctx, default_nodes):
    keys, nodes = default_nodes
    bundle = encrypt_shares(Scalar(42), nodes, threshold=3)

    assert bundle.threshold == 3
    assert bundle.node_count == 5
    for node, (encrypted_share, proof) in zip(nodes, bundle.entries):
        assert verify_proof(proof, node.public_key)
        assert proof.x_h == encrypted_share.point
    verify_bundle(bundle, nodes)

    decrypted = decrypt_all(bundle, keys, nodes)
    expected = ctx.mul_g(Scalar(42))
    for subset in itertools.combinations(decrypted, 3):
        assert reconstruct_public_secret(list(subset), 3) == expected


def test_decryption_yields_committed_share_point(ctx, default_nodes):
    keys, nodes = default_nodes
    bundle = encrypt_shares(Scalar.random(), nodes, threshold=3)
    for decrypted, node in zip(decrypt_all(bundle, keys, nodes), nodes):
        # x_g = share·G 为分发者证明中公开的份额点
        _, dealer_proof = bundle.entry_for(node.index)
        assert decrypted.point == dealer_proof.x_g
        assert decrypted.proof.x_g == node.public_key
        assert verify_decrypted_share(decrypted, node, bundle.entry_for(node.index)[0], bundle.commitments)


def test_decryption_with_wrong_key_is_detected(ctx, default_nodes):
    keys, nodes = default_nodes
    bundle = encrypt_shares(Scalar.random(), nodes, threshold=3)
    node = nodes[0]
    encrypted_share, proof = bundle.entry_for(node.index)
    wrong_key = keys[2]

    assert encrypted_share.point * wrong_key.inverse() != proof.x_g
    with pytest.raises(InvalidProof) as excinfo:
        decrypt_share(node, wrong_key, encrypted_share, proof, bundle.commitments)
    assert excinfo.value.index == node.index


def test_zero_private_key_raises_arithmetic_error(default_nodes):
    _, nodes = default_nodes
    bundle = encrypt_shares(Scalar.random(), nodes, threshold=2)
    encrypted_share, proof = bundle.entry_for(1)
    with pytest.raises(ScalarArithmeticError):
        decrypt_share(nodes[0], Scalar.zero(), encrypted_share, proof, bundle.commitments)


def test_threshold_one(ctx, make_nodes):
    keys, nodes = make_nodes(3)
    secret = Scalar.random()
    bundle = encrypt_shares(secret, nodes, threshold=1)
    verify_bundle(bundle, nodes)
    for decrypted in decrypt_all(bundle, keys, nodes):
        assert decrypted.point == ctx.mul_g(secret)
        assert reconstruct_public_secret([decrypted], 1) == ctx.mul_g(secret)


def test_threshold_equals_n(ctx, make_nodes):
    keys, nodes = make_nodes(4)
    secret = Scalar.random()
    bundle = encrypt_shares(secret, nodes, threshold=4)
    verify_bundle(bundle, nodes)
    decrypted = decrypt_all(bundle, keys, nodes)
    assert reconstruct_public_secret(decrypted, 4) == ctx.mul_g(secret)
    # t-1 个份额按 t-1 门限插值得到的不是秘密
    assert reconstruct_public_secret(decrypted[:3], 3) != ctx.mul_g(secret)
    with pytest.raises(InvalidInput):
        reconstruct_public_secret(decrypted[:3], 4)


def test_reconstruction_ignores_repeated_shares(ctx, default_nodes):
    keys, nodes = default_nodes
    secret = Scalar.random()
    bundle = encrypt_shares(secret, nodes, threshold=2)
    d1, _, d3, _, _ = decrypt_all(bundle, keys, nodes)
    assert reconstruct_public_secret([d1, d1, d3], 2) == ctx.mul_g(secret)
    with pytest.raises(InvalidInput):
        reconstruct_public_secret([d1, d1], 2)
    forged = replace(d1, point=d1.point + ctx.g)
    with pytest.raises(InvalidInput):
        reconstruct_public_secret([d1, forged, d3], 2)


def test_corrupted_entry_is_reported(default_nodes):
    keys, nodes = default_nodes
    bundle = corrupt(encrypt_shares(Scalar.random(), nodes, threshold=3), 4)

    assert find_invalid_shares(bundle, nodes) == [4]
    with pytest.raises(InvalidProof) as excinfo:
        verify_bundle(bundle, nodes)
    assert excinfo.value.index == 4

    encrypted_share, proof = bundle.entry_for(4)
    with pytest.raises(InvalidProof):
        decrypt_share(nodes[3], keys[4], encrypted_share, proof, bundle.commitments)
    # 其余节点仍可正常解密
    encrypted_share, proof = bundle.entry_for(1)
    decrypt_share(nodes[0], keys[1], encrypted_share, proof, bundle.commitments)


def test_share_inconsistent_with_commitments_is_reported(ctx, default_nodes):
    _, nodes = default_nodes
    bundle = encrypt_shares(Scalar.random(), nodes, threshold=3)
    other = encrypt_shares(Scalar.random(), nodes, threshold=3)
    # 证明本身有效，但与承诺不一致
    mixed = replace(bundle, entries=(other.entries[0],) + bundle.entries[1:])
    assert find_invalid_shares(mixed, nodes) == [1]


def test_bundle_checked_against_wrong_nodes(make_nodes):
    _, nodes = make_nodes(3)
    _, strangers = make_nodes(3)
    bundle = encrypt_shares(Scalar.random(), nodes, threshold=2)
    assert find_invalid_shares(bundle, strangers) == [1, 2, 3]
    with pytest.raises(InvalidInput):
        find_invalid_shares(bundle, nodes[:2])


def test_verify_decrypted_share_rejects_forgeries(ctx, default_nodes):
    keys, nodes = default_nodes
    bundle = encrypt_shares(Scalar.random(), nodes, threshold=3)
    decrypted = decrypt_all(bundle, keys, nodes)
    encrypted_share = bundle.entry_for(1)[0]

    forged_point = replace(decrypted[0], point=decrypted[1].point)
    assert not verify_decrypted_share(forged_point, nodes[0], encrypted_share, bundle.commitments)
    assert not verify_decrypted_share(decrypted[0], nodes[1], encrypted_share, bundle.commitments)
    wrong_proof = replace(decrypted[0], proof=decrypted[1].proof)
    assert not verify_decrypted_share(wrong_proof, nodes[0], encrypted_share, bundle.commitments)


@pytest.mark.parametrize("threshold", [0, 6])
def test_threshold_out_of_range(default_nodes, threshold):
    _, nodes = default_nodes
    with pytest.raises(InvalidInput):
        encrypt_shares(Scalar(1), nodes, threshold=threshold)


def test_node_indices_must_be_dense(ctx, default_nodes):
    _, nodes = default_nodes
    shuffled = [nodes[1], nodes[0]] + nodes[2:]
    with pytest.raises(InvalidInput):
        encrypt_shares(Scalar(1), shuffled, threshold=2)
    gapped = nodes[:4] + [NodeRecord(7, nodes[4].public_key)]
    with pytest.raises(InvalidInput):
        encrypt_shares(Scalar(1), gapped, threshold=2)
    with pytest.raises(InvalidInput):
        encrypt_shares(Scalar(1), [], threshold=1)


def test_secret_and_key_types_are_checked(default_nodes):
    keys, nodes = default_nodes
    with pytest.raises(InvalidInput):
        encrypt_shares(42, nodes, threshold=3)
    bundle = encrypt_shares(Scalar(42), nodes, threshold=3)
    encrypted_share, proof = bundle.entry_for(1)
    with pytest.raises(InvalidInput):
        decrypt_share(nodes[0], int(keys[1]), encrypted_share, proof, bundle.commitments)
    with pytest.raises(InvalidInput):
        decrypt_share(nodes[1], keys[2], encrypted_share, proof, bundle.commitments)


def test_pvss_session_records_performance(ctx, make_nodes, capsys):
    keys, nodes = make_nodes(4)
    pvss = PVSS.from_config(PVSSConfig(number_of_nodes=4, threshold=2, max_workers=2))
    secret = Scalar.random()
    bundle = pvss.share_secret(secret, nodes)
    assert pvss.verify_bundle(bundle, nodes) == []
    decrypted = [pvss.decrypt_share(node, keys[node.index], bundle) for node in nodes[:2]]
    assert pvss.reconstruct(decrypted) == ctx.mul_g(secret)

    phases = [stat.phase_name for stat in pvss.performance_stats]
    assert phases[0] == "Share distribution"
    assert phases[-1] == "Public secret reconstruction"
    assert [stat.node_index for stat in pvss.performance_stats if stat.node_index] == [1, 2]

    pvss.print_performance_report()
    out = capsys.readouterr().out
    assert "PVSS SESSION TIMING (N=4, T=2)" in out
    assert "decrypt ms" in out
    # 每个完成解密的节点各占一行
    node_rows = [line.split() for line in out.splitlines() if line.strip().startswith(("1 ", "2 "))]
    assert [row[0] for row in node_rows] == ["1", "2"]
    assert "slowest: node" in out and "2/4 nodes decrypted" in out
    assert "Share decryption (node" not in out


def test_pvss_session_validates_parameters(make_nodes):
    with pytest.raises(InvalidInput):
        PVSS(3, 4)
    _, nodes = make_nodes(2)
    with pytest.raises(InvalidInput):
        PVSS(3, 2).share_secret(Scalar(1), nodes)
