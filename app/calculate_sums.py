"""Berechnet Summen und Datumsfelder eines Angebotsdokuments.

Usage: python -m calculate_sums <input.html> <output.html>
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from env import load_env
from formatting import format_currency
from logging_setup import setup_logging
from processor import process_document

logger = logging.getLogger(__name__)

_USAGE = "Usage: python -m calculate_sums <input.html> <output.html>"


def main(argv: list[str] | None = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 2:
        print(_USAGE, file=sys.stderr)
        return 1

    input_path, output_path = Path(args[0]), Path(args[1])
    if not input_path.exists():
        print(f"Fehler: Datei nicht gefunden: {input_path}", file=sys.stderr)
        return 1

    try:
        result = process_document(input_path, output_path)
    except Exception as exc:
        logger.exception("calc.failed input=%s", input_path)
        print(f"Fehler: {exc}", file=sys.stderr)
        return 1

    if result.dates_replaced > 0:
        print(f"✓ {result.dates_replaced} Datum(s) aktualisiert")

    if result.calculated:
        print("✓ Summen berechnet:")
        print(f"  Netto:  {format_currency(result.subtotal)}")
        print(f"  MwSt.:  {format_currency(result.vat)}")
        print(f"  Brutto: {format_currency(result.total)}")

    return 0


def cli() -> None:
    load_env()
    setup_logging()
    sys.exit(main())


if __name__ == "__main__":
    cli()
