from __future__ import annotations

from pathlib import Path


def repo_root() -> Path:
    # app/core/paths.py -> core -> app -> repo
    return Path(__file__).resolve().parents[2]


def resolve_repo_path(path_value: str) -> Path:
    """Absolute paths pass through; relative ones resolve from the CWD when they exist there, else from the repo root."""
    path = Path(path_value)
    if path.is_absolute():
        return path
    if path.exists():
        return path.resolve()
    return (repo_root() / path).resolve()
