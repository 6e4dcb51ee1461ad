from __future__ import annotations

import csv
import datetime as dt
import hashlib
import json
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from . import config


DEFAULT_INDEX_FIELDS = [
    "timestamp",
    "dataset",
    "tag",
    "run_dir",

    "plug_in",
    "n",
    "p",
    "sigma2_hat",

    "focused_tuning",
    "loocv_tuning",
    "focused_prediction",
    "loocv_prediction",

    "focused_risk",
    "loocv_risk",
    "n_starts_converged",

    "inputs_sha256",
]


def sha256_text(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def sha256_json(obj: Dict[str, Any]) -> str:
    # stable hashing: sort keys + compact separators
    txt = json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
    return sha256_text(txt)


def sha256_array(*arrays: np.ndarray) -> str:
    h = hashlib.sha256()
    for a in arrays:
        a = np.ascontiguousarray(a, dtype=float)
        h.update(str(a.shape).encode("utf-8"))
        h.update(a.tobytes())
    return h.hexdigest()


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def save_json(path: Path, obj: Dict[str, Any]) -> None:
    ensure_parent(path)
    path.write_text(json.dumps(obj, indent=2, ensure_ascii=False), encoding="utf-8")


def create_run_dir(root: Path, dataset: str, tag: str) -> Path:
    """
    Creates:
      <root>/<dataset>/<timestamp>_<tag>/
        figures/
    Never overwrites (errors if exists).
    """
    ts = dt.datetime.now().strftime("%Y-%m-%d_%H%M%S_%f")
    run_dir = root / dataset / f"{ts}_{tag}"
    run_dir.mkdir(parents=True, exist_ok=False)
    (run_dir / "figures").mkdir(exist_ok=True)
    return run_dir


def append_index_row(index_csv: Path, row: Dict[str, Any], field_order: Optional[list[str]] = None) -> None:
    """
    Appends a single row to <root>/index.csv.
    Creates file with header if missing or empty.
    Missing columns are written as empty.
    Extra keys not in field_order are appended at the end (stable).
    """
    ensure_parent(index_csv)

    base_fields = field_order[:] if field_order else DEFAULT_INDEX_FIELDS[:]
    extra_fields = [k for k in row.keys() if k not in base_fields]
    fields = base_fields + sorted(extra_fields)

    file_exists = index_csv.exists()
    needs_header = (not file_exists) or (index_csv.stat().st_size == 0)

    with index_csv.open("a", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fields)
        if needs_header:
            writer.writeheader()

        out = {k: row.get(k, "") for k in fields}
        writer.writerow(out)


def record_fit(model, dataset: str, tag: str, root=None, save_figure: bool = False) -> Path:
    """
    Persist a fitted FocusedRidge: result.json, start_results.csv, optionally
    figures/risk_curve.png, and one row in <root>/index.csv.

    Returns the run directory.
    """
    root = Path(config.RUNS_DIR if root is None else root)
    run_dir = create_run_dir(root, dataset, tag)

    result = model.result_.to_dict()
    payload = {
        "plug_in": model.plug_in_.value,
        "n": model.n_samples_,
        "p": model.n_features_,
        "sigma2_hat": model.sigma2_hat_,
        "focused_risk": model.focused_risk_,
        "loocv_risk": model.loocv_risk_,
        "curve_endpoint": model.curve_endpoint_,
        "inputs_sha256": model.inputs_sha256_,
        **result,
    }
    payload["config_sha256"] = sha256_json({
        "plug_in": model.plug_in_.value,
        "starts": [float(s) for s in model.starts_],
    })
    save_json(run_dir / "result.json", payload)
    model.start_results_.to_csv(run_dir / "start_results.csv", index=False)

    if save_figure:
        ax = model.plot_curve()
        ax.figure.savefig(run_dir / "figures" / "risk_curve.png", dpi=150, bbox_inches="tight")

    row = {
        "timestamp": dt.datetime.now().isoformat(timespec="seconds"),
        "dataset": dataset,
        "tag": tag,
        "run_dir": str(run_dir),
        "n_starts_converged": int(model.start_results_["converged"].sum()),
        **{k: v for k, v in payload.items() if k != "config_sha256"},
    }
    append_index_row(root / "index.csv", row)
    return run_dir
