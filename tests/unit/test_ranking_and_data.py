import numpy as np
import pytest

from replynet.data import available_datasets, get_dataset, register_dataset
from replynet.data.registry import DatasetSpec
from replynet.training.ranking import Response, format_responses, rank_responses


def test_rank_responses_orders_by_score_then_vocabulary():
    ranked = rank_responses([0.2, 0.9, 0.2, 0.5], ["a", "b", "c", "d"], top_k=3)
    assert [r.word for r in ranked] == ["b", "d", "a"]
    assert ranked[0].percent == pytest.approx(90.0)


def test_rank_responses_clips_top_k():
    assert len(rank_responses([0.1, 0.2], ["a", "b"], top_k=5)) == 2
    assert rank_responses([0.1, 0.2], ["a", "b"], top_k=0) == []


def test_rank_responses_rejects_mismatched_scores():
    with pytest.raises(ValueError):
        rank_responses([0.1, 0.2, 0.3], ["a", "b"])


def test_format_responses():
    text = format_responses([Response("yes", 0.875), Response("no", 0.05)])
    assert text == "yes (87.5%) no (5.0%)"


def test_chat_dataset_builds_reply_examples(chat_file):
    spec = get_dataset("chat", path=str(chat_file), user="Bob")
    assert len(spec) == 4
    assert spec.d_in == spec.d_out == len(spec.vocabulary)
    first_prompt = spec.inputs[0]
    active = {spec.vocabulary[i] for i in np.flatnonzero(first_prompt)}
    assert active == {"are", "you", "coming", "tonight"}
    assert spec.provenance["pairs"] == 4
    assert len(spec.provenance["sha256"]) == 64


def test_chat_dataset_requires_replies(chat_file):
    with pytest.raises(ValueError, match="never replies"):
        get_dataset("chat", path=str(chat_file), user="Zed")
    with pytest.raises(ValueError):
        get_dataset("chat", path=str(chat_file))


def test_identity_dataset_is_seeded():
    a = get_dataset("identity", size=3, repeats=2, seed=4)
    b = get_dataset("identity", size=3, repeats=2, seed=4)
    assert np.array_equal(a.inputs, b.inputs)
    assert np.array_equal(a.inputs, a.targets)
    assert a.inputs.shape == (6, 3)


def test_registry_lookup_and_validation():
    assert {"chat", "identity"} <= set(available_datasets())
    with pytest.raises(KeyError):
        get_dataset("missing")

    @register_dataset("empty-fixture")
    def _empty(**_):
        return DatasetSpec(
            name="empty-fixture",
            inputs=np.zeros((0, 2)),
            targets=np.zeros((0, 2)),
            vocabulary=["a", "b"],
        )

    with pytest.raises(ValueError, match="no training examples"):
        get_dataset("empty-fixture")
