from __future__ import annotations

import unittest

from planner.options import is_value_option, merge_options, option_name


class OptionNameTests(unittest.TestCase):
    def test_second_dash_is_stripped_only_when_requested(self) -> None:
        self.assertEqual(option_name("--name", strip_double_dash=True), "name")
        self.assertEqual(option_name("--name", strip_double_dash=False), "-name")
        self.assertEqual(option_name("-name", strip_double_dash=False), "name")
        self.assertIsNone(option_name("name", strip_double_dash=True))

    def test_value_options(self) -> None:
        for token in ("-name", "-root", "--compress", "--threshold"):
            self.assertTrue(is_value_option(token, strip_double_dash=True), token)
        self.assertFalse(is_value_option("--verbose", strip_double_dash=True))
        self.assertFalse(is_value_option("--compress", strip_double_dash=False))


class MergeOptionsTests(unittest.TestCase):
    def test_file_value_replaces_target_value_and_new_options_are_appended(self) -> None:
        merged = merge_options(
            ["--name", "foo", "--verbose"],
            ["--name", "bar", "--root", "/r"],
            strip_double_dash=True,
        )
        self.assertEqual(merged, ["--name", "bar", "--verbose", "--root", "/r"])

    def test_merging_a_list_with_itself_changes_nothing(self) -> None:
        options = ["-name", "app", "-no-compress", "--threshold", "3"]
        self.assertEqual(merge_options(options, options, strip_double_dash=True), options)

    def test_double_dash_is_not_a_value_option_for_old_tools(self) -> None:
        merged = merge_options(["--name", "foo"], ["--name", "bar"], strip_double_dash=False)
        self.assertEqual(merged, ["--name", "foo", "bar"])

    def test_single_dash_value_option_for_old_tools(self) -> None:
        merged = merge_options(["-name", "foo"], ["-name", "bar"], strip_double_dash=False)
        self.assertEqual(merged, ["-name", "bar"])

    def test_trailing_value_option_without_value(self) -> None:
        self.assertEqual(merge_options(["-name", "foo"], ["-name"], strip_double_dash=True), ["-name", "foo"])
        self.assertEqual(merge_options([], ["-root"], strip_double_dash=True), ["-root"])

    def test_missing_value_option_keeps_its_value(self) -> None:
        merged = merge_options(["-o", "9"], ["--threshold", "9"], strip_double_dash=True)
        self.assertEqual(merged, ["-o", "9", "--threshold", "9"])

    def test_target_options_are_not_modified(self) -> None:
        target = ["--compress", "1"]
        merge_options(target, ["--compress", "9"], strip_double_dash=True)
        self.assertEqual(target, ["--compress", "1"])


if __name__ == "__main__":
    unittest.main()
