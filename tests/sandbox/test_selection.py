"""Tests for sandbox selection and pickers."""

import io
import os
import shutil
import subprocess
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from rich.console import Console

from emacs_sandbox import messaging
from emacs_sandbox.errors import ConfigurationError
from emacs_sandbox.pickers import PICKERS, FzfPicker, Picker, PromptPicker, get_picker
from emacs_sandbox.sandbox.base import CatalogEntry, SelectionOrigin
from emacs_sandbox.sandbox.resolver import SandboxResolver
from emacs_sandbox.sandbox.selection import SandboxSelector


class FakePicker(Picker):
    def __init__(self, answer):
        self.answer = answer
        self.calls = []

    def is_available(self) -> bool:
        return True

    def get_name(self) -> str:
        return "fake"

    def pick(self, prompt, local, catalog):
        self.calls.append((prompt, list(local), dict(catalog)))
        return self.answer


class TestSandboxSelector(unittest.TestCase):
    """Test cases for SandboxSelector."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="emacs_sandbox_test_")
        os.mkdir(os.path.join(self.test_dir, "mine"))
        self.resolver = SandboxResolver(self.test_dir)
        self.catalog = [
            CatalogEntry(repo="https://github.com/bbatsov/prelude.git", name="prelude"),
            CatalogEntry(repo="seagle0128/.emacs.d", depth=5),
            CatalogEntry(repo="https://example.com/mine.git", name="mine"),
        ]

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _select(self, answer):
        picker = FakePicker(answer)
        selector = SandboxSelector(self.resolver, self.catalog, picker, default_depth=3)
        return selector.select(), picker

    def test_candidates_exclude_local_sandboxes(self):
        _, picker = self._select(None)
        prompt, local, catalog = picker.calls[0]
        self.assertEqual(local, ["mine"])
        self.assertEqual(
            catalog,
            {
                "prelude": "https://github.com/bbatsov/prelude.git",
                "seagle0128": "seagle0128/.emacs.d",
            },
        )

    def test_local_choice(self):
        selection, _ = self._select("mine")
        self.assertEqual(selection.name, "mine")
        self.assertEqual(selection.origin, SelectionOrigin.EXISTING_LOCAL)
        self.assertIsNone(selection.spec)

    def test_catalog_choice_carries_spec(self):
        selection, _ = self._select("seagle0128")
        self.assertEqual(selection.origin, SelectionOrigin.CATALOG_SPEC)
        self.assertEqual(selection.spec.repo, "seagle0128/.emacs.d")
        self.assertEqual(selection.spec.depth, 5)
        self.assertTrue(selection.spec.recursive)

    def test_raw_url_choice(self):
        selection, _ = self._select("git@github.com:purcell/emacs.d.git")
        self.assertEqual(selection.origin, SelectionOrigin.RAW_URL_SPEC)
        self.assertEqual(selection.name, "purcell")
        self.assertEqual(selection.spec.repo, "git@github.com:purcell/emacs.d.git")
        self.assertEqual(selection.spec.depth, 3)

    def test_unrecognized_text_is_no_selection(self):
        selection, _ = self._select("not-a-sandbox")
        self.assertTrue(selection.is_empty)
        self.assertEqual(selection.origin, SelectionOrigin.NONE)

    def test_cancel_is_no_selection(self):
        selection, _ = self._select(None)
        self.assertTrue(selection.is_empty)

    def test_resolve_without_picker_interaction(self):
        picker = FakePicker("unused")
        selector = SandboxSelector(self.resolver, self.catalog, picker)
        selection = selector.resolve("prelude")
        self.assertEqual(selection.origin, SelectionOrigin.CATALOG_SPEC)
        self.assertEqual(picker.calls, [])


class TestPickers(unittest.TestCase):
    """Test cases for the picker registry and implementations."""

    def setUp(self):
        self.output = io.StringIO()
        self.previous_console = messaging.get_console()
        messaging.set_console(Console(file=self.output, width=120))

    def tearDown(self):
        messaging.set_console(self.previous_console)

    def test_registry(self):
        self.assertIsInstance(get_picker("prompt"), PromptPicker)
        self.assertIsInstance(get_picker("fzf"), FzfPicker)

    def test_registry_keys_are_picker_names(self):
        self.assertEqual(sorted(PICKERS), ["fzf", "prompt"])
        for name, picker in PICKERS.items():
            self.assertEqual(picker().get_name(), name)
            self.assertEqual(get_picker(name).get_name(), name)

    def test_unknown_picker(self):
        with self.assertRaises(ConfigurationError):
            get_picker("helm")

    @patch("emacs_sandbox.pickers.prompt_picker.Prompt.ask")
    def test_prompt_picker_by_number(self, mock_ask):
        mock_ask.return_value = "2"
        choice = PromptPicker().pick("Sandbox", ["mine"], {"prelude": "bbatsov/prelude"})
        self.assertEqual(choice, "prelude")
        self.assertIn("bbatsov/prelude", self.output.getvalue())

    @patch("emacs_sandbox.pickers.prompt_picker.Prompt.ask")
    def test_prompt_picker_free_text(self, mock_ask):
        mock_ask.return_value = " https://example.com/conf.git "
        choice = PromptPicker().pick("Sandbox", [], {})
        self.assertEqual(choice, "https://example.com/conf.git")

    @patch("emacs_sandbox.pickers.prompt_picker.Prompt.ask")
    def test_prompt_picker_out_of_range_number_is_text(self, mock_ask):
        mock_ask.return_value = "7"
        self.assertEqual(PromptPicker().pick("Sandbox", ["mine"], {}), "7")

    @patch("emacs_sandbox.pickers.prompt_picker.Prompt.ask")
    def test_prompt_picker_empty_answer(self, mock_ask):
        mock_ask.return_value = ""
        self.assertIsNone(PromptPicker().pick("Sandbox", ["mine"], {}))

    @patch("shutil.which")
    def test_fzf_selection(self, mock_which):
        mock_which.return_value = "/usr/bin/fzf"
        runner = MagicMock(
            return_value=subprocess.CompletedProcess(
                ["fzf"], 0, "pre\nprelude\thttps://github.com/bbatsov/prelude.git\n"
            )
        )
        picker = FzfPicker(runner=runner)

        choice = picker.pick("Sandbox", ["mine"], {"prelude": "https://github.com/bbatsov/prelude.git"})

        self.assertEqual(choice, "prelude")
        fed = runner.call_args.kwargs["input"]
        self.assertIn("mine\tlocal", fed)
        self.assertIn("prelude\thttps://github.com/bbatsov/prelude.git", fed)

    @patch("shutil.which")
    def test_fzf_unmatched_query_is_free_text(self, mock_which):
        mock_which.return_value = "/usr/bin/fzf"
        runner = MagicMock(return_value=subprocess.CompletedProcess(["fzf"], 1, "purcell/emacs.d\n"))
        self.assertEqual(FzfPicker(runner=runner).pick("Sandbox", [], {}), "purcell/emacs.d")

    @patch("shutil.which")
    def test_fzf_cancel(self, mock_which):
        mock_which.return_value = "/usr/bin/fzf"
        runner = MagicMock(return_value=subprocess.CompletedProcess(["fzf"], 130, ""))
        self.assertIsNone(FzfPicker(runner=runner).pick("Sandbox", ["mine"], {}))

    @patch("shutil.which")
    def test_fzf_not_installed(self, mock_which):
        mock_which.return_value = None
        with self.assertRaises(ConfigurationError):
            FzfPicker(runner=MagicMock()).pick("Sandbox", [], {})


if __name__ == "__main__":
    unittest.main()
