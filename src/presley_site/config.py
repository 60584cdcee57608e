from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


def _repo_root() -> Path:
    # src/presley_site/config.py -> src/presley_site -> src -> repo root
    return Path(__file__).resolve().parents[2]


def env_bool(name: str, default: bool = False) -> bool:
    v = (os.getenv(name) or "").strip().lower()
    if not v:
        return default
    return v in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


DEFAULT_PORT = 5000


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read from `SITE_*` environment variables."""

    site_root: Path = field(default_factory=lambda: _repo_root() / "site")
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    require_auth: bool = True
    log_level: str = "INFO"
    canvas_width: int = 600
    canvas_height: int = 300

    @classmethod
    def from_env(cls) -> "Settings":
        root = (os.getenv("SITE_ROOT") or "").strip()
        return cls(
            site_root=Path(root).resolve() if root else _repo_root() / "site",
            host=(os.getenv("SITE_HOST") or "").strip() or "0.0.0.0",
            port=env_int("SITE_PORT", DEFAULT_PORT),
            require_auth=env_bool("SITE_REQUIRE_AUTH", default=True),
            log_level=(os.getenv("SITE_LOG_LEVEL") or "").strip().upper() or "INFO",
        )
