import tempfile
import unittest
from pathlib import Path

from backer_discounts.errors import ParseError
from backer_discounts.io import parse_csv, read_rows


class TestParseCsv(unittest.TestCase):
    def test_headers_and_rows_in_source_order(self):
        table = parse_csv(b"name,price,backing_tier\nAlice,\xc2\xa325.00,Gold\nBob,oops,Silver\n")
        self.assertEqual(table.headers, ["name", "price", "backing_tier"])
        self.assertEqual(table.row_count, 2)
        self.assertEqual(table.rows[0], {"name": "Alice", "price": "£25.00", "backing_tier": "Gold"})
        self.assertEqual(table.rows[1]["name"], "Bob")

    def test_short_rows_padded_and_extra_fields_dropped(self):
        table = parse_csv(b"name,price,note\nAlice,10\nBob,20,hi,surplus\n")
        self.assertEqual(table.rows[0], {"name": "Alice", "price": "10", "note": ""})
        self.assertEqual(table.rows[1], {"name": "Bob", "price": "20", "note": "hi"})
        for row in table.rows:
            self.assertTrue(set(row) <= set(table.headers))
            self.assertEqual(set(row), set(table.headers))

    def test_quoted_fields_and_bom(self):
        data = '\ufeff"Backer Name","Pledge"\n"Smith, Jane","$ 40"\n"Multi\nLine",5\n'.encode("utf-8")
        table = parse_csv(data)
        self.assertEqual(table.headers, ["Backer Name", "Pledge"])
        self.assertEqual(table.rows[0]["Backer Name"], "Smith, Jane")
        self.assertEqual(table.rows[1]["Backer Name"], "Multi\nLine")

    def test_blank_lines_are_skipped(self):
        table = parse_csv(b"\nname,price\n\nAlice,1\n,\n")
        self.assertEqual(table.headers, ["name", "price"])
        self.assertEqual(table.row_count, 1)

    def test_empty_input(self):
        table = parse_csv(b"")
        self.assertEqual(table.headers, [])
        self.assertEqual(table.row_count, 0)

    def test_unterminated_quote_raises(self):
        with self.assertRaises(ParseError):
            parse_csv(b'name,price\n"Alice,25\n')

    def test_invalid_utf8_raises(self):
        with self.assertRaises(ParseError):
            parse_csv(b"name,price\n\xff\xfe,1\n")

    def test_to_dict_wire_form(self):
        table = parse_csv(b"name,price\nAlice,1\n")
        self.assertEqual(
            table.to_dict(),
            {"headers": ["name", "price"], "data": [{"name": "Alice", "price": "1"}], "rowCount": 1},
        )

    def test_read_rows_from_disk(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "backers.csv"
            path.write_bytes(b"name,price\nAlice,1\n")
            table = read_rows(path)
        self.assertEqual(table.row_count, 1)


if __name__ == "__main__":
    unittest.main()
