from __future__ import annotations

from document_tree import DocumentTree, set_node_text
from formatting import format_currency
from invoice_calculations import AggregateTotals


def write_totals(tree: DocumentTree, totals: AggregateTotals) -> int:
    """
    Fill the totals block (subtotal/vat/total slots) and every generic total
    display. Existing content is always overwritten. Returns the number of
    nodes written.
    """
    written = 0
    values = {
        "subtotal": totals.subtotal,
        "vat": totals.vat,
        "total": totals.total,
    }

    if tree.totals_block is not None:
        for name, slot in tree.totals_block.slots.items():
            set_node_text(slot, format_currency(values[name]))
            written += 1

    formatted_total = format_currency(totals.total)
    for node in tree.total_slots:
        set_node_text(node, formatted_total)
        written += 1

    return written
