from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path

from bs4 import BeautifulSoup

from date_fields import resolve_dates
from document_tree import adapt_tree, parse_document, serialize_document
from invoice_calculations import aggregate_tables
from totals_writer import write_totals

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    dates_replaced: int = 0
    calculated: bool = False
    subtotal: Decimal | None = None
    vat: Decimal | None = None
    total: Decimal | None = None

    @property
    def changed(self) -> bool:
        return self.dates_replaced > 0 or self.calculated


def process_tree(soup: BeautifulSoup, today: date | None = None) -> ProcessResult:
    """
    Resolve date placeholders and calculate all annotated tables in place.

    When ``changed`` is false on the result the tree was not touched and the
    caller should keep the original markup.
    """
    tree = adapt_tree(soup)
    result = ProcessResult()

    result.dates_replaced = resolve_dates(tree, today=today)

    totals = aggregate_tables(tree)
    if totals is not None:
        write_totals(tree, totals)
        result.calculated = True
        result.subtotal = totals.subtotal
        result.vat = totals.vat
        result.total = totals.total

    return result


def process_document(input_path: Path | str, output_path: Path | str, today: date | None = None) -> ProcessResult:
    input_path = Path(input_path)
    output_path = Path(output_path)

    html = input_path.read_text(encoding="utf-8")
    soup = parse_document(html)
    result = process_tree(soup, today=today)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    if not result.changed:
        shutil.copyfile(input_path, output_path)
        logger.info("process.passthrough input=%s", input_path.name)
        return result

    output_path.write_text(serialize_document(soup), encoding="utf-8")
    logger.info(
        "process.done input=%s dates=%s calculated=%s total=%s",
        input_path.name,
        result.dates_replaced,
        result.calculated,
        result.total,
    )
    return result
