"""Tests for the configuration module."""

import os
import tempfile
import unittest
from argparse import Namespace

import yaml

from hitreport.config import (
    DEFAULT_LOG_DIR,
    Config,
    ConfigError,
    _parse_bool,
    load_config,
    load_yaml_config,
)

_ENV_KEYS = (
    "HTTPD_REPORT_LOG_DIR", "HTTPD_REPORT_ACCESS_GLOB", "HTTPD_REPORT_ERROR_GLOB",
    "HTTPD_REPORT_OUTPUT", "HTTPD_REPORT_RECURSE", "HTTPD_REPORT_FOLLOW_SYMLINKS",
)


def _cli(**overrides) -> Namespace:
    values = dict(
        files=[], read_from_stdin=False, read_gzipped_files=False, follow_symlinks=False,
        recurse=False, details=False, access_glob=None, error_glob=None,
        output_file=None, log_dir=None, config=None,
    )
    values.update(overrides)
    return Namespace(**values)


class TestParseBool(unittest.TestCase):
    def test_true_values(self):
        for val in ("true", "True", "1", "yes", " YES ", True):
            self.assertTrue(_parse_bool(val), f"Expected True for {val!r}")

    def test_false_values(self):
        for val in ("false", "0", "no", "", "anything", False):
            self.assertFalse(_parse_bool(val), f"Expected False for {val!r}")


class TestConfigDefaults(unittest.TestCase):
    def test_default_values(self):
        cfg = Config()
        self.assertFalse(cfg.follow_symlinks)
        self.assertFalse(cfg.read_from_stdin)
        self.assertFalse(cfg.recurse)
        self.assertEqual(cfg.access_glob, "*.access.log*")
        self.assertEqual(cfg.error_glob, "*.error.log*")
        self.assertEqual(cfg.log_dir, DEFAULT_LOG_DIR)
        self.assertIsNone(cfg.output_file)
        self.assertEqual(cfg.input_files, ())

    def test_frozen(self):
        cfg = Config()
        with self.assertRaises(AttributeError):
            cfg.log_dir = "/tmp"


class TestLoadYamlConfig(unittest.TestCase):
    def _write(self, text):
        f = tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False)
        f.write(text)
        f.close()
        self.addCleanup(os.unlink, f.name)
        return f.name

    def test_no_path(self):
        self.assertEqual(load_yaml_config(None), {})

    def test_loads_mapping(self):
        path = self._write(yaml.dump({"log_dir": "/srv/logs", "recurse": True}))
        self.assertEqual(load_yaml_config(path), {"log_dir": "/srv/logs", "recurse": True})

    def test_empty_file(self):
        self.assertEqual(load_yaml_config(self._write("")), {})

    def test_missing_file_raises(self):
        with self.assertRaises(ConfigError):
            load_yaml_config("/nonexistent/path/config.yml")

    def test_invalid_yaml_raises(self):
        with self.assertRaises(ConfigError):
            load_yaml_config(self._write("log_dir: [unclosed\n"))

    def test_non_mapping_raises(self):
        with self.assertRaises(ConfigError):
            load_yaml_config(self._write("- just\n- a list\n"))


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self._orig_env = os.environ.copy()
        for key in _ENV_KEYS:
            os.environ.pop(key, None)

    def tearDown(self):
        os.environ.clear()
        os.environ.update(self._orig_env)

    def test_defaults_without_anything(self):
        self.assertEqual(load_config(), Config())

    def test_cli_flags(self):
        cfg = load_config(_cli(
            files=["a.log", "b.log"], follow_symlinks=True, recurse=True,
            access_glob="*.acc", log_dir="/srv", output_file="out.md",
        ))
        self.assertEqual(cfg.input_files, ("a.log", "b.log"))
        self.assertTrue(cfg.follow_symlinks)
        self.assertTrue(cfg.recurse)
        self.assertEqual(cfg.access_glob, "*.acc")
        self.assertEqual(cfg.error_glob, "*.error.log*")
        self.assertEqual(cfg.log_dir, "/srv")
        self.assertEqual(cfg.output_file, "out.md")

    def test_yaml_values(self):
        cfg = load_config(_cli(), {"log-dir": "/yaml/logs", "recurse": "yes",
                                   "input_files": "single.log"})
        self.assertEqual(cfg.log_dir, "/yaml/logs")
        self.assertTrue(cfg.recurse)
        self.assertEqual(cfg.input_files, ("single.log",))

    def test_unknown_yaml_key_ignored(self):
        with self.assertLogs("hitreport.config", level="WARNING"):
            cfg = load_config(_cli(), {"colour": "blue"})
        self.assertEqual(cfg, Config())

    def test_env_overrides_yaml(self):
        os.environ["HTTPD_REPORT_LOG_DIR"] = "/env/logs"
        os.environ["HTTPD_REPORT_FOLLOW_SYMLINKS"] = "true"
        cfg = load_config(_cli(), {"log_dir": "/yaml/logs", "follow_symlinks": False})
        self.assertEqual(cfg.log_dir, "/env/logs")
        self.assertTrue(cfg.follow_symlinks)

    def test_cli_overrides_env(self):
        os.environ["HTTPD_REPORT_LOG_DIR"] = "/env/logs"
        os.environ["HTTPD_REPORT_OUTPUT"] = "env.md"
        cfg = load_config(_cli(log_dir="/cli/logs"))
        self.assertEqual(cfg.log_dir, "/cli/logs")
        self.assertEqual(cfg.output_file, "env.md")

    def test_unset_flag_keeps_lower_layer(self):
        cfg = load_config(_cli(recurse=False), {"recurse": True})
        self.assertTrue(cfg.recurse)

    def test_empty_output_means_stdout(self):
        os.environ["HTTPD_REPORT_OUTPUT"] = ""
        self.assertIsNone(load_config(_cli()).output_file)


if __name__ == "__main__":
    unittest.main()
