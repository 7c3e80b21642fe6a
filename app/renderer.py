from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path

from renderer_interface import DocumentRenderer

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    pass


def _decode_output(raw: bytes | str | None) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", "replace").strip()
    return raw.strip()


class WeasyprintRenderer(DocumentRenderer):
    """Runs the external HTML-to-PDF converter as a subprocess."""

    def __init__(self, command: str = "weasyprint", cwd: Path | None = None) -> None:
        self._command = shlex.split(command) or ["weasyprint"]
        self._cwd = cwd

    @property
    def command(self) -> list[str]:
        return list(self._command)

    def render(self, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        args = [*self._command, str(source), str(target)]
        logger.debug("render.run args=%s", args)
        try:
            subprocess.run(
                args,
                cwd=str(self._cwd) if self._cwd else None,
                check=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise RenderError(f"Renderer not found: {self._command[0]}") from exc
        except subprocess.CalledProcessError as exc:
            stderr = _decode_output(exc.stderr)
            raise RenderError(
                f"Renderer failed with exit code {exc.returncode}: {stderr or 'no output'}"
            ) from exc
