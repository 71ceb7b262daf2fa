from __future__ import annotations

import json
import os
import tempfile
from functools import lru_cache
from pathlib import Path

from propmatch.core.models import Project
from propmatch.core.supabase_repo import SupabaseRepo


DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "projects.json"


def catalog_path() -> Path:
    raw = os.environ.get("CATALOG_PATH", "").strip()
    return Path(raw) if raw else DEFAULT_CATALOG_PATH


def load_projects(path: Path | str | None = None) -> list[Project]:
    resolved = Path(path) if path is not None else catalog_path()
    with open(resolved, "r", encoding="utf-8") as handle:
        rows = json.load(handle)
    if not isinstance(rows, list):
        raise ValueError(f"Catalog {resolved} must hold a JSON array of projects.")
    return [Project.from_dict(row) for row in rows if isinstance(row, dict)]


def save_projects(projects: list[Project], path: Path | str | None = None) -> None:
    resolved = Path(path) if path is not None else catalog_path()
    payload = json.dumps([project.to_dict() for project in projects], indent=2, ensure_ascii=False)
    # Temp file must share the target's filesystem for os.replace.
    fd, tmp_name = tempfile.mkstemp(prefix=".projects-", suffix=".json", dir=resolved.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(payload + "\n")
        os.replace(tmp_name, resolved)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


@lru_cache(maxsize=1)
def _cached_projects(source: str, location: str) -> tuple[Project, ...]:
    if source == "supabase":
        return tuple(SupabaseRepo().get_projects())
    return tuple(load_projects(location))


def get_projects() -> list[Project]:
    source = os.environ.get("CATALOG_SOURCE", "file").strip().lower() or "file"
    if source not in {"file", "supabase"}:
        raise ValueError(f"Unknown CATALOG_SOURCE={source!r}; expected 'file' or 'supabase'.")
    return list(_cached_projects(source, str(catalog_path())))


def get_project_by_id(project_id: str) -> Project | None:
    for project in get_projects():
        if project.id == project_id:
            return project
    return None


def clear_catalog_cache() -> None:
    _cached_projects.cache_clear()
