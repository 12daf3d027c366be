import unittest

from backer_discounts.errors import TransformError
from backer_discounts.transform import ERROR_PREFIX, compile_transform, is_configured, transform_name


class TestTransformName(unittest.TestCase):
    def test_default_form_snippet_is_identity(self):
        self.assertEqual(transform_name("Alice Smith", "return name;"), "Alice Smith")
        self.assertEqual(transform_name("Alice Smith", "  name  "), "Alice Smith")

    def test_pipeline_operations(self):
        self.assertEqual(transform_name("  alice   smith ", "name | collapse | title"), "Alice Smith")
        self.assertEqual(transform_name("Alice Smith", "return name | first_word | upper;"), "ALICE")
        self.assertEqual(transform_name("Alice Smith", "last_word | lower"), "smith")
        self.assertEqual(transform_name("Zoë Ångström", "name | ascii"), "Zoe Angstrom")
        self.assertEqual(transform_name("Alice Smith", 'name | replace(" ", "-")'), "Alice-Smith")
        self.assertEqual(transform_name("Dr. Alice", "name | remove('Dr. ')"), "Alice")
        self.assertEqual(transform_name("Alexandra", "name | slice(0, 4)"), "Alex")
        self.assertEqual(transform_name("Alexandra", "name | slice(-3)"), "dra")
        self.assertEqual(transform_name("Alice", 'name | prefix("VIP ") | suffix("!")'), "VIP Alice!")

    def test_default_fills_blank_result(self):
        self.assertEqual(transform_name("Alice", "name | remove('Alice') | default('Backer')"), "Backer")

    def test_is_configured(self):
        self.assertFalse(is_configured(""))
        self.assertFalse(is_configured("   \n"))
        self.assertFalse(is_configured(None))
        self.assertTrue(is_configured("return name;"))

    def test_unknown_operation(self):
        with self.assertRaises(TransformError) as ctx:
            transform_name("Alice", "name | shout")
        self.assertTrue(str(ctx.exception).startswith(ERROR_PREFIX))
        self.assertIn("shout", str(ctx.exception))

    def test_code_is_never_executed(self):
        for snippet in (
            "return name.toUpperCase();",
            "__import__('os').system('echo hi')",
            "name | __class__",
            "throw new Error('boom')",
        ):
            with self.subTest(snippet=snippet):
                with self.assertRaises(TransformError):
                    transform_name("Alice", snippet)

    def test_argument_checks(self):
        with self.assertRaises(TransformError):
            transform_name("Alice", "name | replace('a')")
        with self.assertRaises(TransformError):
            transform_name("Alice", "name | slice('a')")
        with self.assertRaises(TransformError):
            transform_name("Alice", "name | upper(1)")
        with self.assertRaises(TransformError):
            transform_name("Alice", "name | slice(1,")
        with self.assertRaises(TransformError):
            transform_name("Alice", "name | slice(1,)")

    def test_empty_result_is_an_error(self):
        with self.assertRaises(TransformError) as ctx:
            transform_name("Alice", "name | slice(0, 0)")
        self.assertIn("empty", str(ctx.exception))

    def test_compiled_pipeline_is_cached(self):
        self.assertIs(compile_transform("name | upper"), compile_transform("name | upper"))
        self.assertEqual(len(compile_transform("name | trim | upper").steps), 2)


if __name__ == "__main__":
    unittest.main()
