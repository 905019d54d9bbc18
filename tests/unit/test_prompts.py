import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "installers" / "bootstrap"))

from nymclient_bootstrap import prompts


class PromptTests(unittest.TestCase):
    def test_unattended_returns_default(self):
        self.assertTrue(prompts.unattended("Install Rust?", True))
        self.assertFalse(prompts.unattended("Install anyway?", False))

    def test_parse_answer(self):
        self.assertTrue(prompts.parse_answer("Y", False))
        self.assertTrue(prompts.parse_answer(" yes ", False))
        self.assertFalse(prompts.parse_answer("No", True))
        self.assertTrue(prompts.parse_answer("maybe", True))
        self.assertFalse(prompts.parse_answer("", False))

    def test_console_confirm_shows_default(self):
        asked = []

        def reader(text):
            asked.append(text)
            return ""

        confirm = prompts.console_confirm(reader)
        self.assertTrue(confirm("Do you want to install Rust?", True))
        self.assertEqual(asked, ["Do you want to install Rust? [y/n] (y): "])

    def test_console_confirm_eof_uses_default(self):
        def reader(_text):
            raise EOFError

        self.assertFalse(prompts.console_confirm(reader)("Install anyway?", False))

    def test_make_confirm(self):
        self.assertIs(prompts.make_confirm(False), prompts.unattended)
        self.assertIs(prompts.make_confirm(True, assume_yes=True), prompts.always_yes)


if __name__ == "__main__":
    unittest.main()
