from __future__ import annotations

from pathlib import Path
from typing import Protocol


class DocumentRenderer(Protocol):
    def render(self, source: Path, target: Path) -> None:
        ...
