import unittest

from backer_discounts.codes import CodeFactory, MAX_CODE_LENGTH
from backer_discounts.normalize import code_fragment, parse_price


class TestParsePrice(unittest.TestCase):
    def test_currency_glyphs_are_stripped(self):
        self.assertEqual(parse_price("£25.00"), 25.0)
        self.assertEqual(parse_price("Â£25.00"), 25.0)
        self.assertEqual(parse_price("$ 40"), 40.0)
        self.assertEqual(parse_price("€12,50"), 12.0)
        self.assertEqual(parse_price(" 7.5 "), 7.5)
        self.assertEqual(parse_price("30 GBP"), 30.0)
        self.assertEqual(parse_price(15), 15.0)

    def test_invalid_prices(self):
        for value in ("oops", "", "   ", "£", None, "inf", "nan", "-"):
            with self.subTest(value=value):
                self.assertIsNone(parse_price(value))


class TestCodeFragment(unittest.TestCase):
    def test_upper_and_underscores(self):
        self.assertEqual(code_fragment("Alice O'Neil"), "ALICE_O_NEIL")
        self.assertEqual(code_fragment("zoë"), "ZO_")
        self.assertEqual(code_fragment(""), "")


class TestCodeFactory(unittest.TestCase):
    def test_format(self):
        factory = CodeFactory(clock=lambda: 1700000000.5)
        self.assertEqual(factory.next_code("Alice"), "KICKSTARTER_ALICE_1700000000500")

    def test_same_millisecond_never_repeats(self):
        factory = CodeFactory(clock=lambda: 1700000000.0)
        codes = [factory.next_code("Alice") for _ in range(5)]
        self.assertEqual(len(set(codes)), 5)
        self.assertEqual(codes[1], "KICKSTARTER_ALICE_1700000000001")

    def test_long_names_keep_the_suffix(self):
        factory = CodeFactory(clock=lambda: 1700000000.0)
        code = factory.next_code("Bartholomew Maximilian Featherstonehaugh-Cholmondeley")
        self.assertEqual(len(code), MAX_CODE_LENGTH)
        self.assertTrue(code.startswith("KICKSTARTER_BARTHOLOMEW"))
        self.assertTrue(code.endswith("_1700000000000"))

    def test_long_prefix_keeps_the_suffix(self):
        factory = CodeFactory(prefix="K" * 40, max_length=20, clock=lambda: 1700000000.0)
        codes = [factory.next_code("Alice") for _ in range(2)]
        self.assertEqual(codes[0], "KKKKKK_1700000000000")
        self.assertEqual(codes[1], "KKKKKK_1700000000001")
        self.assertTrue(all(len(c) == 20 for c in codes))

    def test_custom_prefix_is_cleaned(self):
        factory = CodeFactory(prefix="spring sale", clock=lambda: 1.0)
        self.assertEqual(factory.next_code("Bob"), "SPRING_SALE_BOB_1000")


if __name__ == "__main__":
    unittest.main()
