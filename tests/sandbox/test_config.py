"""Tests for configuration loading."""

import json
import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock, patch

from emacs_sandbox import config


class TestConfig(unittest.TestCase):
    """Test cases for the sandbox.cfg and catalog.json readers."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp(prefix="emacs_sandbox_test_")
        self.config_file = os.path.join(self.test_dir, "sandbox.cfg")
        self.catalog_file = os.path.join(self.test_dir, "catalog.json")
        self.patchers = [
            patch.object(config, "CONFIG_DIR", self.test_dir),
            patch.object(config, "CONFIG_FILE", self.config_file),
            patch.object(config, "CATALOG_FILE", self.catalog_file),
        ]
        for patcher in self.patchers:
            patcher.start()

    def tearDown(self):
        for patcher in self.patchers:
            patcher.stop()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_defaults(self):
        self.assertEqual(config.get_sandbox_root(), os.path.join(self.test_dir, "sandboxes"))
        self.assertEqual(config.get_script_dir(), os.path.join(self.test_dir, "bin"))
        self.assertEqual(config.get_inherited_paths(), config.DEFAULT_INHERITED_PATHS)
        self.assertEqual(config.get_picker_name(), "prompt")
        self.assertEqual(config.get_default_depth(), 1)

    def test_set_and_get_value(self):
        config.set_config_value("sandbox_root", "/srv/sandboxes")
        self.assertEqual(config.get_sandbox_root(), "/srv/sandboxes")
        with open(self.config_file) as f:
            self.assertIn("[sandbox]", f.read())

    def test_inherited_paths_are_comma_separated(self):
        config.set_config_value("inherited_paths", ".ssh, .gnupg ,, .config/git")
        self.assertEqual(config.get_inherited_paths(), [".ssh", ".gnupg", ".config/git"])

    def test_default_depth_values(self):
        config.set_config_value("default_depth", "none")
        self.assertIsNone(config.get_default_depth())
        config.set_config_value("default_depth", "10")
        self.assertEqual(config.get_default_depth(), 10)
        config.set_config_value("default_depth", "full")
        self.assertEqual(config.get_default_depth(), "full")

    def test_picker_name_is_normalized(self):
        config.set_config_value("picker", " FZF ")
        self.assertEqual(config.get_picker_name(), "fzf")

    def test_builtin_catalog_when_file_missing(self):
        catalog = config.load_catalog()
        names = [entry.sandbox_name for entry in catalog]
        self.assertIn("prelude", names)
        self.assertIn("seagle0128", names)

    def test_catalog_file(self):
        with open(self.catalog_file, "w") as f:
            json.dump(
                {"catalog": [{"repo": "purcell/emacs.d", "recursive": False, "depth": "full"}]},
                f,
            )
        catalog = config.load_catalog()
        self.assertEqual(len(catalog), 1)
        self.assertEqual(catalog[0].sandbox_name, "purcell")
        self.assertFalse(catalog[0].recursive)
        self.assertEqual(catalog[0].depth, "full")

    @patch("emacs_sandbox.messaging.emit_error")
    def test_malformed_catalog_is_reported(self, mock_error):
        with open(self.catalog_file, "w") as f:
            f.write('{"catalog": [{"name": "no repo"}]}')
        self.assertEqual(config.load_catalog(), [])
        mock_error.assert_called_once()

    @patch("emacs_sandbox.messaging.emit_error")
    def test_invalid_depth_is_rejected(self, mock_error):
        with open(self.catalog_file, "w") as f:
            json.dump({"catalog": [{"repo": "purcell/emacs.d", "depth": 0}]}, f)
        self.assertEqual(config.load_catalog(), [])

    def test_load_settings(self):
        config.set_config_value("editor", "/opt/emacs/bin/emacs")
        config.set_config_value("real_home", "/home/me")
        settings = config.load_settings()
        self.assertEqual(settings.editor, "/opt/emacs/bin/emacs")
        self.assertEqual(settings.real_home, "/home/me")
        self.assertEqual(settings.home_env_var, "HOME")
        self.assertTrue(settings.catalog)

    def test_editor_lookup_skips_script_dir(self):
        script_dir = os.path.join(self.test_dir, "bin")
        real_dir = os.path.join(self.test_dir, "real")
        for directory in (script_dir, real_dir):
            os.makedirs(directory)
            binary = os.path.join(directory, "emacs")
            with open(binary, "w") as f:
                f.write("#!/bin/sh\n")
            os.chmod(binary, 0o755)

        with patch.dict(os.environ, {"PATH": os.pathsep.join([script_dir, real_dir])}):
            self.assertEqual(config.get_editor(), os.path.join(real_dir, "emacs"))

    def test_search_path_without_drops_every_alias(self):
        script_dir = os.path.join(self.test_dir, "bin")
        os.makedirs(script_dir)
        alias = os.path.join(self.test_dir, "bin", "..", "bin")
        search = os.pathsep.join([alias, "/usr/bin", script_dir])
        with patch.dict(os.environ, {"PATH": search}):
            self.assertEqual(config._search_path_without(script_dir), "/usr/bin")


class TestUserHome(unittest.TestCase):
    """Paths derived from the user's home must not follow a sandboxed $HOME."""

    def setUp(self):
        self.passwd = MagicMock(pw_dir="/home/me")
        self.patchers = [
            patch.object(config.pwd, "getpwuid", return_value=self.passwd),
            patch.dict(os.environ, {"HOME": "/home/me/.emacs_sandbox/sandboxes/prelude"}),
        ]
        for patcher in self.patchers:
            patcher.start()
        os.environ.pop("EMACS_SANDBOX_CONFIG_DIR", None)

    def tearDown(self):
        for patcher in self.patchers:
            patcher.stop()

    def test_default_config_dir_uses_passwd_home(self):
        self.assertEqual(config._default_config_dir(), "/home/me/.emacs_sandbox")

    def test_config_dir_override(self):
        with patch.dict(os.environ, {"EMACS_SANDBOX_CONFIG_DIR": "/srv/conf"}):
            self.assertEqual(config._default_config_dir(), "/srv/conf")

    def test_tilde_expands_to_passwd_home(self):
        self.assertEqual(config._expand_user("~/.local/bin"), "/home/me/.local/bin")
        self.assertEqual(config._expand_user("~"), "/home/me")
        self.assertEqual(config._expand_user("/opt/emacs"), "/opt/emacs")

    def test_real_home_without_config(self):
        with patch.object(config, "get_value", return_value=None):
            self.assertEqual(config.get_real_home(), "/home/me")


if __name__ == "__main__":
    unittest.main()
