from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


_DEFAULT_PORT = 3000
_DEFAULT_SETTLE_MS = 500
_DEFAULT_POLL_MS = 500
_DEFAULT_RENDERER = "weasyprint"


@dataclass(frozen=True)
class Settings:
    root_dir: Path
    documents_dir: Path
    output_dir: Path
    assets_dir: Path
    preview_file: Path
    port: int = _DEFAULT_PORT
    settle_ms: int = _DEFAULT_SETTLE_MS
    poll_ms: int = _DEFAULT_POLL_MS
    renderer_command: str = _DEFAULT_RENDERER

    @property
    def settle_seconds(self) -> float:
        return self.settle_ms / 1000

    @property
    def poll_seconds(self) -> float:
        return self.poll_ms / 1000


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name) or default)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    value = (os.getenv(name) or "").strip()
    return Path(value).expanduser().resolve() if value else default


def load_settings(root_dir: Path | str | None = None) -> Settings:
    if root_dir is None:
        root = _env_path("AP_ROOT_DIR", Path.cwd().resolve())
    else:
        root = Path(root_dir).resolve()

    return Settings(
        root_dir=root,
        documents_dir=_env_path("AP_DOCUMENTS_DIR", root / "documents"),
        output_dir=_env_path("AP_OUTPUT_DIR", root / "output"),
        assets_dir=_env_path("AP_ASSETS_DIR", root / "assets"),
        preview_file=_env_path("AP_PREVIEW_FILE", Path(__file__).resolve().parent / "static" / "preview.html"),
        port=_env_int("AP_PORT", _DEFAULT_PORT),
        settle_ms=_env_int("AP_SETTLE_MS", _DEFAULT_SETTLE_MS),
        poll_ms=_env_int("AP_POLL_MS", _DEFAULT_POLL_MS),
        renderer_command=(os.getenv("AP_RENDERER") or _DEFAULT_RENDERER).strip() or _DEFAULT_RENDERER,
    )
