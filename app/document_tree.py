"""Typed view over annotated HTML documents.

The HTML is parsed once with BeautifulSoup. ``adapt_tree`` then collects the
annotated nodes into plain records (date placeholders, calculation tables with
their line rows, totals sinks) so the calculation passes never re-read raw
attributes. Every record carries its document position in ``order``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from bs4 import BeautifulSoup, Tag

from formatting import parse_with_default


DATE_ATTR = "data-date"
CALC_ATTR = "data-calc"
VAT_ATTR = "data-vat"
QUANTITY_ATTR = "data-quantity"
UNIT_PRICE_ATTR = "data-unit-price"
TOTALS_BLOCK_ATTR = "data-totals"
TOTAL_SLOT_ATTR = "data-total"
FIELD_ATTR = "data-field"

DEFAULT_VAT_RATE = Decimal("19")
ROW_CELL_COUNT = 5

# Cell positions inside a line row: description, quantity, unit, unit price, total
QUANTITY_CELL = 1
UNIT_PRICE_CELL = 3
TOTAL_CELL = 4

TOTALS_FIELDS = ("subtotal", "vat", "total")

# libxml2 closes implied <td>/<tr> end tags the way browsers do
_HTML_PARSER = "lxml"


@dataclass
class DatePlaceholder:
    node: Tag
    expression: str
    order: int


@dataclass
class LineRow:
    node: Tag
    quantity: Decimal
    unit_price: Decimal
    cells: list[Tag]
    order: int

    @property
    def row_total(self) -> Decimal:
        return self.quantity * self.unit_price

    @property
    def fillable(self) -> bool:
        return len(self.cells) >= ROW_CELL_COUNT


@dataclass
class CalcTable:
    node: Tag
    vat_rate: Decimal
    rows: list[LineRow]
    order: int


@dataclass
class TotalsSink:
    node: Tag
    slots: dict[str, Tag]


@dataclass
class DocumentTree:
    soup: BeautifulSoup
    dates: list[DatePlaceholder] = field(default_factory=list)
    tables: list[CalcTable] = field(default_factory=list)
    totals_block: TotalsSink | None = None
    total_slots: list[Tag] = field(default_factory=list)

    @property
    def has_annotations(self) -> bool:
        return bool(self.dates or self.tables)


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, _HTML_PARSER)


def serialize_document(soup: BeautifulSoup) -> str:
    return str(soup)


def node_text(node: Tag) -> str:
    return node.get_text()


def set_node_text(node: Tag, text: str) -> None:
    # Replaces all children, like assigning textContent in the DOM
    node.string = text


def _is_body_row(row: Tag) -> bool:
    section = row.find_parent(["thead", "tbody", "tfoot", "table"])
    return section is None or section.name not in ("thead", "tfoot")


def _adapt_row(row: Tag, order: int) -> LineRow:
    return LineRow(
        node=row,
        quantity=parse_with_default(row.get(QUANTITY_ATTR), 0),
        unit_price=parse_with_default(row.get(UNIT_PRICE_ATTR), 0),
        cells=row.find_all("td", recursive=False),
        order=order,
    )


def _adapt_table(table: Tag, positions: dict[int, int]) -> CalcTable:
    rows = [
        _adapt_row(row, positions[id(row)])
        for row in table.find_all("tr")
        if row.has_attr(QUANTITY_ATTR) and row.has_attr(UNIT_PRICE_ATTR) and _is_body_row(row)
    ]
    return CalcTable(
        node=table,
        vat_rate=parse_with_default(table.get(VAT_ATTR), DEFAULT_VAT_RATE),
        rows=sorted(rows, key=lambda r: r.order),
        order=positions[id(table)],
    )


def _adapt_totals_block(block: Tag) -> TotalsSink:
    slots: dict[str, Tag] = {}
    for name in TOTALS_FIELDS:
        slot = block.find(attrs={FIELD_ATTR: name})
        if slot is not None:
            slots[name] = slot
    return TotalsSink(node=block, slots=slots)


def adapt_tree(soup: BeautifulSoup) -> DocumentTree:
    elements = soup.find_all(True)
    positions = {id(el): index for index, el in enumerate(elements)}

    dates = [
        DatePlaceholder(node=el, expression=str(el.get(DATE_ATTR) or ""), order=positions[id(el)])
        for el in elements
        if el.has_attr(DATE_ATTR)
    ]
    tables = [
        _adapt_table(el, positions)
        for el in elements
        if el.name == "table" and el.get(CALC_ATTR) == "true"
    ]
    block = next((el for el in elements if el.get(TOTALS_BLOCK_ATTR) == "true"), None)
    total_slots = [el for el in elements if el.get(TOTAL_SLOT_ATTR) == "true"]

    return DocumentTree(
        soup=soup,
        dates=sorted(dates, key=lambda d: d.order),
        tables=sorted(tables, key=lambda t: t.order),
        totals_block=_adapt_totals_block(block) if block is not None else None,
        total_slots=total_slots,
    )
