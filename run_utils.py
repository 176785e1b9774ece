from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

_SOURCE_SUFFIXES = (".csv", ".tsv", ".txt")


def resolve_base_name(source: str | None, default: str = "patients") -> str:
    """Derive a run name from a CSV path or URL (``data/demo.csv`` -> ``demo``)."""
    if not source:
        return default
    name = Path(urlsplit(source).path).name
    for suffix in _SOURCE_SUFFIXES:
        if name.endswith(suffix):
            name = name[: -len(suffix)]
            break
    return name or default


def run_root(base_name: str, run_date: str | None = None, runs_dir: Path = Path("runs")) -> Path:
    root = runs_dir / (run_date or date.today().strftime("%Y%m%d")) / base_name
    root.mkdir(parents=True, exist_ok=True)
    return root


def write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def load_summary(root: Path) -> dict[str, Any]:
    summary_path = root / "summary.json"
    if not summary_path.exists():
        return {}
    return json.loads(summary_path.read_text(encoding="utf-8"))


def update_summary(root: Path, updates: dict[str, Any]) -> None:
    summary = load_summary(root)
    summary.update(updates)
    write_json(root / "summary.json", summary)
