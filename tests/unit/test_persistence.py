import numpy as np
import pytest

from replynet.core.network import ModelFormatError, NeuralNetwork, Phase


def _trained(layer_sizes, seed=0, steps=25):
    net = NeuralNetwork(layer_sizes, rng=seed)
    rng = np.random.default_rng(seed)
    for _ in range(steps):
        net.forward(rng.random(layer_sizes[0]))
        net.backpropagate(rng.integers(0, 2, size=layer_sizes[-1]).astype(float))
        net.update_weights(0.3, 0.9)
    return net


def test_save_then_load_reproduces_outputs(tmp_path):
    source = _trained([4, 5, 3, 4], seed=1)
    path = tmp_path / "model.txt"
    assert source.save(path)

    restored = NeuralNetwork([4, 5, 3, 4], rng=99)
    assert restored.load(path)

    probes = np.random.default_rng(5).normal(size=(10, 4))
    for probe in probes:
        assert np.allclose(source.predict(probe), restored.predict(probe), atol=1e-9, rtol=0)
    for key, value in source.state_dict().items():
        assert np.array_equal(value, restored.state_dict()[key])


def test_saved_layout_is_one_line_per_destination_unit(tmp_path):
    net = NeuralNetwork([3, 2, 1], rng=0)
    path = tmp_path / "model.txt"
    net.save(path)
    lines = path.read_text().splitlines()
    assert lines[0] == "# replynet-mlp 1"
    assert lines[1] == "# topology 3 2 1"
    body = [line.split() for line in lines[2:]]
    assert [len(row) for row in body] == [4, 4, 3]
    assert float(body[0][0]) == net.weights[0][0, 0]
    assert float(body[1][-1]) == net.biases[0][1]
    assert float(body[2][-1]) == net.biases[1][0]


def test_load_resets_momentum_and_phase(tmp_path):
    net = _trained([2, 3, 2])
    path = tmp_path / "model.txt"
    net.save(path)
    net.forward([1.0, 0.0])
    assert net.load(path)
    assert net.phase is Phase.IDLE
    assert all(not v.any() for v in net.weight_velocity + net.bias_velocity)


def test_topology_mismatch_is_rejected(tmp_path):
    path = tmp_path / "model.txt"
    NeuralNetwork([3, 4, 3], rng=0).save(path)

    other = NeuralNetwork([3, 5, 3], rng=1)
    before = other.state_dict()
    with pytest.raises(ModelFormatError, match="topology"):
        other.load(path)
    for key, value in before.items():
        assert np.array_equal(value, other.state_dict()[key])


def test_unknown_format_tag_is_rejected(tmp_path):
    path = tmp_path / "model.txt"
    NeuralNetwork([2, 2], rng=0).save(path)
    text = path.read_text().replace("replynet-mlp 1", "replynet-mlp 7")
    path.write_text(text)
    with pytest.raises(ModelFormatError):
        NeuralNetwork([2, 2], rng=0).load(path)


def test_headerless_file_is_read_when_layout_matches(tmp_path):
    net = NeuralNetwork([2, 3, 1], rng=3)
    path = tmp_path / "legacy.txt"
    rows = []
    for W, b in zip(net.weights, net.biases):
        for j in range(W.shape[0]):
            rows.append(" ".join(repr(float(v)) for v in [*W[j], b[j]]))
    path.write_text("\n".join(rows) + "\n")

    restored = NeuralNetwork([2, 3, 1], rng=0)
    assert restored.load(path)
    assert np.array_equal(restored.predict([0.2, 0.8]), net.predict([0.2, 0.8]))


@pytest.mark.parametrize(
    "body",
    [
        "1 2 3\n4 5 6\n",
        "1 2\n3 4\n5 6\n",
        "1 2 x\n4 5 6\n7 8 9\n",
        b"\xff\xfe\x00garbage",
    ],
)
def test_malformed_body_is_rejected(tmp_path, body):
    path = tmp_path / "bad.txt"
    if isinstance(body, bytes):
        path.write_bytes(body)
    else:
        path.write_text(body)
    with pytest.raises(ModelFormatError):
        NeuralNetwork([2, 3], rng=0).load(path)


def test_io_failures_return_false(tmp_path):
    net = NeuralNetwork([2, 2], rng=0)
    assert net.save(tmp_path / "missing-dir" / "model.txt") is False
    assert net.load(tmp_path / "does-not-exist.txt") is False
