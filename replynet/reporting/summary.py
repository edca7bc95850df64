"""Deterministic run summaries built from ``metrics.jsonl``."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, List, Mapping, Sequence

import numpy as np


def compute_auc(points: Sequence[float]) -> float:
    """Area under ``points`` along an implicit epoch axis."""

    if len(points) < 2:
        return 0.0
    y = np.asarray(points, dtype=np.float64)
    return float(np.sum((y[1:] + y[:-1]) * 0.5))


def _read_records(metrics_path: Path) -> List[Mapping[str, object]]:
    records: List[Mapping[str, object]] = []
    if metrics_path.exists():
        for line in metrics_path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records


def _extract_numeric(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[float]]:
    metrics: dict[str, list[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in {"epoch", "seed"}:
                continue
            if isinstance(value, (int, float)):
                metrics.setdefault(key, []).append(float(value))
    return metrics


def write_summary(
    metrics_jsonl: str | Path, out_summary_json: str | Path, *, tail: int = 32
) -> str:
    """Summarise every numeric metric in ``metrics_jsonl`` into ``out_summary_json``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    records = _read_records(Path(metrics_jsonl))
    tail_window = min(tail, len(records))

    summary_metrics: dict[str, Mapping[str, float]] = {}
    for name, values in _extract_numeric(records).items():
        arr = np.asarray(values, dtype=np.float64)
        summary_metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "last": float(arr[-1]),
            "tail_auc": compute_auc(arr[-tail_window:].tolist()) if tail_window else 0.0,
        }

    summary = {
        "version": 1,
        "records": len(records),
        "tail_window": tail_window,
        "metrics": summary_metrics,
    }
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["compute_auc", "write_summary"]
