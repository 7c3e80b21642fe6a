from __future__ import annotations

from pathlib import Path
import sys

import pytest

APP_PATH = Path(__file__).resolve().parents[1] / "app"
if str(APP_PATH) not in sys.path:
    sys.path.insert(0, str(APP_PATH))

from settings import Settings  # noqa: E402


class FakeRenderer:
    def __init__(self, fail: Exception | None = None) -> None:
        self.calls: list[tuple[Path, Path]] = []
        self.sources: list[str] = []
        self._fail = fail

    def render(self, source: Path, target: Path) -> None:
        self.calls.append((source, target))
        self.sources.append(source.read_text(encoding="utf-8"))
        if self._fail is not None:
            raise self._fail
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(b"%PDF-1.7 fake")


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    documents = tmp_path / "documents"
    output = tmp_path / "output"
    documents.mkdir()
    output.mkdir()
    return Settings(
        root_dir=tmp_path,
        documents_dir=documents,
        output_dir=output,
        assets_dir=tmp_path / "assets",
        preview_file=tmp_path / "preview.html",
    )


@pytest.fixture()
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()
