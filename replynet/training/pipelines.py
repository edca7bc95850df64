"""Pipeline assembly: dataset -> network -> training -> artifacts."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import yaml

from ..core.network import NeuralNetwork
from ..core.types import RunResult
from ..data import registry
from ..data.registry import DatasetSpec
from ..data.text import BagOfWords
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .ranking import Response, rank_responses
from .trainer import Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "chat-default": {
        "data": {"name": "chat", "options": {"path": None, "user": None}},
        "model": {"hidden": [10, 10], "seed": 0},
        "train": {
            "epochs": 100,
            "lr": 0.1,
            "momentum": 0.9,
            "error_threshold": 0.01,
            "top_k": 5,
            "run_dir": "runs/chat-default",
            "model_path": None,
            "retrain": False,
            "enable_plots": False,
        },
    },
    "chat-quick": {
        "data": {"name": "chat", "options": {"path": None, "user": None}},
        "model": {"hidden": [8], "seed": 0},
        "train": {
            "epochs": 20,
            "lr": 0.2,
            "momentum": 0.5,
            "error_threshold": 0.05,
            "top_k": 3,
            "run_dir": "runs/chat-quick",
            "model_path": None,
            "retrain": True,
            "enable_plots": False,
        },
    },
    "identity-smoke": {
        "data": {"name": "identity", "options": {"size": 2, "repeats": 1, "seed": 0}},
        "model": {"hidden": [2], "seed": 7},
        "train": {
            "epochs": 500,
            "lr": 0.5,
            "momentum": 0.9,
            "error_threshold": 0.01,
            "top_k": 2,
            "run_dir": "runs/identity-smoke",
            "model_path": None,
            "retrain": True,
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


@dataclass
class ChatSession:
    """A trained (or loaded) network together with its vocabulary."""

    network: NeuralNetwork
    encoder: BagOfWords
    top_k: int = 5
    result: RunResult | None = None

    def respond(self, text: str, top_k: int | None = None) -> List[Response]:
        scores = self.network.predict(self.encoder.encode(text))
        return rank_responses(
            scores, self.encoder.vocabulary, self.top_k if top_k is None else top_k
        )


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    session = build_session(config)
    if session.result is None:
        raise RuntimeError("build_session returned a session without a run result")
    return session.result


def vocabulary_path(model_path: Path) -> Path:
    """Location of the vocabulary stored alongside ``model_path``."""

    return model_path.with_name(model_path.name + ".vocab.json")


def _stored_vocabulary(path: Path) -> List[str] | None:
    if not path.exists():
        return None
    return list(json.loads(path.read_text(encoding="utf-8")))


def build_session(config: Mapping[str, object]) -> ChatSession:
    data_cfg = dict(config["data"])
    model_cfg = dict(config.get("model", {}))
    train_cfg = dict(config.get("train", {}))

    dataset = registry.get_dataset(data_cfg["name"], **dict(data_cfg.get("options") or {}))
    dims = _build_dims(model_cfg, dataset)
    seed = int(model_cfg.get("seed", 0))
    network = NeuralNetwork(dims, rng=seed)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    model_path = Path(train_cfg.get("model_path") or run_dir / "model.txt")
    vocab_path = vocabulary_path(model_path)
    metrics_path = run_dir / "metrics.jsonl"
    summary_file = run_dir / "summary.json"
    learning_rate = float(train_cfg.get("lr", 0.1))
    momentum = float(train_cfg.get("momentum", 0.9))
    threshold = float(train_cfg.get("error_threshold", 0.01))
    top_k = int(train_cfg.get("top_k", 5))

    reuse = model_path.exists() and not bool(train_cfg.get("retrain", False))
    loaded = reuse and _stored_vocabulary(vocab_path) == list(dataset.vocabulary)
    if reuse and not loaded:
        print(f"Vocabulary stored with {model_path} does not match the dataset; retraining.")

    if loaded:
        if not network.load(model_path):
            raise OSError(f"Could not read model from {model_path}")
        epochs = 0
        final_error = evaluate(network, dataset)
        converged = final_error < threshold
    else:
        _print_startup_summary(
            dataset_name=dataset.name,
            dims=dims,
            examples=len(dataset),
            learning_rate=learning_rate,
            momentum=momentum,
            param_count=network.parameter_count,
        )
        jsonl = JsonlSink(metrics_path, split="train", seed=seed)
        csv_sink = CsvSink(run_dir / "metrics.csv", split="train")
        plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
        trainer = Trainer(network, learning_rate, momentum, callbacks=[plots])
        outcome = trainer.run(
            dataset.inputs,
            dataset.targets,
            epochs=int(train_cfg.get("epochs", 100)),
            error_threshold=threshold,
            split_loggers={"train": [jsonl, csv_sink]},
        )
        plots.close()
        epochs, final_error, converged = outcome.epochs, outcome.final_error, outcome.converged
        if converged:
            print(f"Error threshold reached after {epochs} epochs.")
        model_path.parent.mkdir(parents=True, exist_ok=True)
        if not network.save(model_path):
            raise OSError(f"Could not write model to {model_path}")
        vocab_path.write_text(json.dumps(list(dataset.vocabulary)), encoding="utf-8")
        summary_tail = int(train_cfg.get("summary_tail", 32))
        write_summary(metrics_path, summary_file, tail=summary_tail)

    safe = _safe_config(config, dims, model_path)
    manifest = write_manifest(
        run_dir / "manifest.json", config=safe, dataset_provenance=dataset.provenance
    )
    (run_dir / "config.json").write_text(json.dumps(safe, indent=2))

    result = RunResult(
        epochs=epochs,
        final_error=float(final_error),
        converged=bool(converged),
        model_path=str(model_path),
        metrics_path=str(metrics_path) if metrics_path.exists() else "",
        manifest_path=manifest,
        summary_path=str(summary_file) if summary_file.exists() else "",
        loaded=loaded,
    )
    return ChatSession(
        network=network,
        encoder=BagOfWords(dataset.vocabulary),
        top_k=top_k,
        result=result,
    )


def evaluate(network: NeuralNetwork, dataset: DatasetSpec) -> float:
    """Mean example error of ``network`` over ``dataset`` without training."""

    total = 0.0
    for x, t in dataset.examples():
        network.forward(x)
        total += network.get_error(t)
    return total / len(dataset)


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _build_dims(model_cfg: Mapping[str, object], dataset: DatasetSpec) -> List[int]:
    dims = [dataset.d_in]
    dims.extend(int(h) for h in model_cfg.get("hidden", [10, 10]))  # type: ignore[union-attr]
    dims.append(dataset.d_out)
    return dims


def _safe_config(
    config: Mapping[str, object], dims: Sequence[int], model_path: Path
) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config, default=str))
    copied.setdefault("model", {})["dims"] = list(dims)
    copied.setdefault("train", {})["model_path"] = str(model_path)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    dims: Sequence[int],
    examples: int,
    learning_rate: float,
    momentum: float,
    param_count: int,
) -> None:
    print("=== ReplyNet run ===")
    print(f"Dataset       : {dataset_name}")
    print(f"Examples      : {examples}")
    print(f"Dimensions    : {list(dims)}")
    print(f"Learning rate : {learning_rate}")
    print(f"Momentum      : {momentum}")
    print(f"Parameters    : {param_count}")
    print("====================")


__all__ = [
    "ChatSession",
    "build_session",
    "evaluate",
    "load_preset",
    "presets",
    "run_pipeline",
    "vocabulary_path",
]
