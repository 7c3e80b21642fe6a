from decimal import Decimal
import unittest

from document_tree import adapt_tree, parse_document
from invoice_calculations import aggregate_tables, calculate_table_totals, fill_row_cells


def _row(quantity: str, unit_price: str, cells: tuple[str, ...] = ("Beratung", "", "Std.", "", "")) -> str:
    tds = "".join(f"<td>{cell}</td>" for cell in cells)
    return f"<tr data-quantity='{quantity}' data-unit-price='{unit_price}'>{tds}</tr>"


def _table(rows: str, vat: str | None = None) -> str:
    vat_attr = f" data-vat='{vat}'" if vat is not None else ""
    return f"<table data-calc='true'{vat_attr}><tbody>{rows}</tbody></table>"


def _cells(soup, index: int = 0) -> list[str]:
    row = soup.select("tr[data-quantity]")[index]
    return [td.get_text() for td in row.find_all("td")]


class RowCalculationTests(unittest.TestCase):
    def test_row_total_and_cell_filling(self) -> None:
        soup = parse_document(_table(_row("3", "19.99")))
        totals = aggregate_tables(adapt_tree(soup))

        self.assertEqual(totals.subtotal, Decimal("59.97"))
        self.assertEqual(_cells(soup), ["Beratung", "3", "Std.", "19,99 €", "59,97 €"])

    def test_prefilled_cells_are_not_overwritten(self) -> None:
        soup = parse_document(_table(_row("5", "10", ("Kabel", "5 Stk", "", "Sonderpreis", ""))))
        aggregate_tables(adapt_tree(soup))

        self.assertEqual(_cells(soup), ["Kabel", "5 Stk", "", "Sonderpreis", "50,00 €"])

    def test_whitespace_only_cells_count_as_empty(self) -> None:
        soup = parse_document(_table(_row("2", "1.5", ("Item", "  ", "", "\n", " "))))
        aggregate_tables(adapt_tree(soup))

        self.assertEqual(_cells(soup), ["Item", "2", "", "1,50 €", "3,00 €"])

    def test_short_rows_are_counted_but_not_filled(self) -> None:
        soup = parse_document(_table(_row("2", "50", ("Pauschale", "", ""))))
        totals = aggregate_tables(adapt_tree(soup))

        self.assertEqual(totals.subtotal, Decimal("100"))
        self.assertEqual(_cells(soup), ["Pauschale", "", ""])

    def test_rows_without_both_annotations_are_ignored(self) -> None:
        html = _table(
            _row("1", "100")
            + "<tr data-quantity='5'><td>a</td><td></td><td></td><td></td><td></td></tr>"
            + "<tr data-unit-price='5'><td>b</td><td></td><td></td><td></td><td></td></tr>"
            + "<tr><td>Zwischenüberschrift</td></tr>"
        )
        soup = parse_document(html)
        tree = adapt_tree(soup)
        totals = aggregate_tables(tree)

        self.assertEqual(len(tree.tables[0].rows), 1)
        self.assertEqual(totals.subtotal, Decimal("100"))

    def test_rows_in_thead_and_tfoot_are_ignored(self) -> None:
        html = (
            "<table data-calc='true'>"
            f"<thead>{_row('9', '9')}</thead>"
            f"<tbody>{_row('1', '10')}</tbody>"
            f"<tfoot>{_row('9', '9')}</tfoot>"
            "</table>"
        )
        totals = aggregate_tables(adapt_tree(parse_document(html)))
        self.assertEqual(totals.subtotal, Decimal("10"))

    def test_rows_with_omitted_end_tags_are_filled(self) -> None:
        html = (
            "<table data-calc='true'>"
            "<tr data-quantity='3' data-unit-price='19.99'><td>Beratung<td><td>Std.<td><td>"
            "<tr data-quantity='1' data-unit-price='10'><td>Fahrt<td><td>km<td><td>"
            "</table>"
        )
        soup = parse_document(html)
        tree = adapt_tree(soup)
        totals = aggregate_tables(tree)

        self.assertEqual(len(tree.tables[0].rows), 2)
        self.assertEqual(totals.subtotal, Decimal("69.97"))
        self.assertEqual(_cells(soup, 0), ["Beratung", "3", "Std.", "19,99 €", "59,97 €"])
        self.assertEqual(_cells(soup, 1), ["Fahrt", "1", "km", "10,00 €", "10,00 €"])

    def test_non_numeric_annotations_default_to_zero(self) -> None:
        soup = parse_document(_table(_row("viele", "10") + _row("2", "n/a")))
        totals = aggregate_tables(adapt_tree(soup))

        self.assertEqual(totals.subtotal, Decimal("0"))
        self.assertEqual(_cells(soup, 0)[1], "0")
        self.assertEqual(_cells(soup, 1)[3], "0,00 €")

    def test_fill_row_cells_reports_filled_count(self) -> None:
        soup = parse_document(_table(_row("1", "2", ("a", "1", "", "", ""))))
        row = adapt_tree(soup).tables[0].rows[0]
        self.assertEqual(fill_row_cells(row), 2)
        self.assertEqual(fill_row_cells(row), 0)


class TableTotalsTests(unittest.TestCase):
    def test_default_vat_rate(self) -> None:
        totals = aggregate_tables(adapt_tree(parse_document(_table(_row("1", "100")))))

        self.assertEqual(totals.vat_rate, Decimal("19"))
        self.assertEqual(totals.vat, Decimal("19"))
        self.assertEqual(totals.total, Decimal("119"))

    def test_non_numeric_vat_rate_uses_default(self) -> None:
        totals = aggregate_tables(adapt_tree(parse_document(_table(_row("1", "100"), vat="hoch"))))
        self.assertEqual(totals.vat, Decimal("19"))

    def test_zero_vat_rate_is_respected(self) -> None:
        totals = aggregate_tables(adapt_tree(parse_document(_table(_row("1", "100"), vat="0"))))
        self.assertEqual(totals.vat, Decimal("0"))
        self.assertEqual(totals.total, Decimal("100"))

    def test_reduced_rate(self) -> None:
        table = adapt_tree(parse_document(_table(_row("3", "5.5"), vat="7"))).tables[0]
        table_totals = calculate_table_totals(table)

        self.assertEqual(table_totals.subtotal, Decimal("16.5"))
        self.assertEqual(table_totals.vat, Decimal("1.155"))
        self.assertEqual(table_totals.total, Decimal("17.655"))

    def test_empty_table_aggregates_to_zero(self) -> None:
        totals = aggregate_tables(adapt_tree(parse_document(_table(""))))

        self.assertIsNotNone(totals)
        self.assertEqual(totals.subtotal, Decimal("0"))
        self.assertEqual(totals.total, Decimal("0"))


class AggregateTests(unittest.TestCase):
    def test_no_calc_tables_returns_none(self) -> None:
        html = "<table><tr data-quantity='1' data-unit-price='1'><td>x</td></tr></table>"
        self.assertIsNone(aggregate_tables(adapt_tree(parse_document(html))))

    def test_multiple_tables_last_rate_wins(self) -> None:
        html = _table(_row("1", "100"), vat="19") + "<p>Optional</p>" + _table(_row("2", "100"), vat="7")
        totals = aggregate_tables(adapt_tree(parse_document(html)))

        self.assertEqual(totals.subtotal, Decimal("300"))
        self.assertEqual(totals.vat, Decimal("33"))
        self.assertEqual(totals.total, Decimal("333"))
        self.assertEqual(totals.vat_rate, Decimal("7"))

    def test_rate_order_follows_document_order(self) -> None:
        html = _table(_row("2", "100"), vat="7") + _table(_row("1", "100"), vat="19")
        totals = aggregate_tables(adapt_tree(parse_document(html)))
        self.assertEqual(totals.vat_rate, Decimal("19"))
        self.assertEqual(totals.vat, Decimal("33"))

    def test_row_total_is_exact_and_totals_are_ordered(self) -> None:
        pairs = [("0", "0"), ("3", "19.99"), ("0.5", "0.01"), ("12.75", "1234.56"), ("1000", "0.333")]
        for quantity, unit_price in pairs:
            with self.subTest(quantity=quantity, unit_price=unit_price):
                tree = adapt_tree(parse_document(_table(_row(quantity, unit_price))))
                row = tree.tables[0].rows[0]
                totals = aggregate_tables(tree)

                self.assertEqual(row.row_total, Decimal(quantity) * Decimal(unit_price))
                self.assertGreaterEqual(totals.total, totals.subtotal)
                self.assertGreaterEqual(totals.subtotal, 0)


if __name__ == "__main__":
    unittest.main()
