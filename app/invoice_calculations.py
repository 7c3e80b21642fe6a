from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from document_tree import (
    DEFAULT_VAT_RATE,
    QUANTITY_CELL,
    TOTAL_CELL,
    UNIT_PRICE_CELL,
    CalcTable,
    DocumentTree,
    LineRow,
    node_text,
    set_node_text,
)
from formatting import format_currency, format_number

logger = logging.getLogger(__name__)


@dataclass
class TableTotals:
    subtotal: Decimal
    vat: Decimal
    total: Decimal
    vat_rate: Decimal


@dataclass
class AggregateTotals:
    subtotal: Decimal = Decimal("0")
    vat: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    # Rate of the last table in document order, not a weighted average
    vat_rate: Decimal = DEFAULT_VAT_RATE

    def add(self, table: TableTotals) -> None:
        self.subtotal += table.subtotal
        self.vat += table.vat
        self.total += table.total
        self.vat_rate = table.vat_rate


def _fill_if_empty(cell, text: str) -> bool:
    if node_text(cell).strip():
        return False
    set_node_text(cell, text)
    return True


def fill_row_cells(row: LineRow) -> int:
    """Write quantity, unit price and row total into blank cells only."""
    if not row.fillable:
        return 0
    filled = 0
    filled += _fill_if_empty(row.cells[QUANTITY_CELL], format_number(row.quantity))
    filled += _fill_if_empty(row.cells[UNIT_PRICE_CELL], format_currency(row.unit_price))
    filled += _fill_if_empty(row.cells[TOTAL_CELL], format_currency(row.row_total))
    return filled


def calculate_table_totals(table: CalcTable) -> TableTotals:
    subtotal = Decimal("0")
    for row in table.rows:
        subtotal += row.row_total
        fill_row_cells(row)

    vat = subtotal * (table.vat_rate / Decimal("100"))
    return TableTotals(subtotal=subtotal, vat=vat, total=subtotal + vat, vat_rate=table.vat_rate)


def aggregate_tables(tree: DocumentTree) -> AggregateTotals | None:
    if not tree.tables:
        return None

    totals = AggregateTotals()
    for table in tree.tables:
        table_totals = calculate_table_totals(table)
        logger.debug(
            "calc.table order=%s rows=%s subtotal=%s vat_rate=%s",
            table.order,
            len(table.rows),
            table_totals.subtotal,
            table_totals.vat_rate,
        )
        totals.add(table_totals)
    return totals
