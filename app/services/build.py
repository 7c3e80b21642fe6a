from __future__ import annotations

import logging
import shutil
from datetime import date
from pathlib import Path

from processor import process_document
from renderer import RenderError
from renderer_interface import DocumentRenderer
from services.storage import (
    calc_temp_path,
    document_stem,
    is_reserved_name,
    list_documents,
    output_pdf_path,
)
from settings import Settings

logger = logging.getLogger(__name__)


def build_pdf(
    html_file: Path | str,
    settings: Settings,
    renderer: DocumentRenderer,
    *,
    today: date | None = None,
) -> Path | None:
    """
    Calculate sums and dates into a transient ``_calc_*.html`` copy, render it
    to ``<output_dir>/<name>.pdf`` and remove the copy again.

    Returns the PDF path, or None when the document was skipped or failed.
    Failures are logged, never raised, so a broken document does not stop
    the others.
    """
    html_file = Path(html_file)
    stem = document_stem(html_file)
    if is_reserved_name(stem):
        return None

    pdf_file = output_pdf_path(settings.output_dir, stem)
    temp_file = calc_temp_path(html_file)

    logger.info("build.start document=%s", stem)
    try:
        try:
            process_document(html_file, temp_file, today=today)
        except Exception:
            logger.warning("build.calc_failed document=%s using original", stem, exc_info=True)
            shutil.copyfile(html_file, temp_file)

        source = temp_file if temp_file.exists() else html_file
        renderer.render(source, pdf_file)
    except (OSError, RenderError):
        logger.exception("build.failed document=%s", stem)
        return None
    finally:
        temp_file.unlink(missing_ok=True)

    logger.info("build.done document=%s pdf=%s", stem, pdf_file)
    return pdf_file


def build_all(settings: Settings, renderer: DocumentRenderer, *, today: date | None = None) -> dict[str, Path | None]:
    results: dict[str, Path | None] = {}
    for stem in list_documents(settings.documents_dir):
        html_file = settings.documents_dir / f"{stem}.html"
        results[stem] = build_pdf(html_file, settings, renderer, today=today)
    return results
