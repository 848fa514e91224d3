from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml


def ensure_dir(path: Path | str) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def load_json(path: Path | str) -> Any:
    return json.loads(Path(path).read_text())


def save_json(path: Path | str, payload: Any) -> None:
    p = Path(path)
    ensure_dir(p.parent)
    p.write_text(json.dumps(payload, indent=2))


def load_yaml(path: Path | str) -> Any:
    return yaml.safe_load(Path(path).read_text())


def save_yaml(path: Path | str, payload: Any) -> None:
    p = Path(path)
    ensure_dir(p.parent)
    p.write_text(yaml.safe_dump(payload, sort_keys=False))


def load_payload(path: Path | str) -> Any:
    """Load a JSON or YAML document, picking the parser from the file suffix."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"No such file: {p}")
    if p.suffix.lower() in (".yaml", ".yml"):
        return load_yaml(p)
    return load_json(p)


def save_payload(path: Path | str, payload: Any) -> Path:
    p = Path(path)
    if p.suffix.lower() in (".yaml", ".yml"):
        save_yaml(p, payload)
    else:
        save_json(p, payload)
    return p
