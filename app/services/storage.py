from __future__ import annotations

import os
from pathlib import Path


DOCUMENT_EXTENSION = ".html"
RESERVED_PREFIX = "_"
CALC_PREFIX = "_calc_"


def is_reserved_name(name: str) -> bool:
    return name.startswith(RESERVED_PREFIX)


def is_watched_document(path: Path | str) -> bool:
    name = os.path.basename(str(path))
    return name.endswith(DOCUMENT_EXTENSION) and not is_reserved_name(name)


def document_stem(path: Path | str) -> str:
    name = os.path.basename(str(path))
    if name.endswith(DOCUMENT_EXTENSION):
        return name[: -len(DOCUMENT_EXTENSION)]
    return name


def output_pdf_path(output_dir: Path, stem: str) -> Path:
    return output_dir / f"{stem}.pdf"


def calc_temp_path(html_file: Path) -> Path:
    return html_file.parent / f"{CALC_PREFIX}{document_stem(html_file)}{DOCUMENT_EXTENSION}"


def list_documents(documents_dir: Path) -> list[str]:
    if not documents_dir.is_dir():
        return []
    return sorted(
        document_stem(entry.name)
        for entry in documents_dir.iterdir()
        if entry.is_file() and is_watched_document(entry.name)
    )


def ensure_dirs(*dirs: Path) -> None:
    for directory in dirs:
        os.makedirs(directory, exist_ok=True)
