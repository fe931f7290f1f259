"""Tests for layered configuration loading and prompt item rendering."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import ceview.config as config
from ceview.models import Compiler


class ConfigFileTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "nested" / "config.json"
        patcher = mock.patch.object(config, "CONFIG_PATH", self.path)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _write(self, text: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(text, encoding="utf-8")

    def test_missing_file_yields_defaults(self) -> None:
        conf = config.resolve_config()

        self.assertEqual(config.load_config(), {})
        self.assertEqual(conf, config.ExplorerConfig())
        self.assertEqual(conf.url, "https://godbolt.org")
        self.assertTrue(conf.live_correlation.enable)
        self.assertEqual(conf.live_correlation.highlight_style, "Cursorline")
        self.assertEqual(conf.prompt_for("compiler"), "Select compiler> ")

    def test_file_values_merge_over_defaults(self) -> None:
        self._write(json.dumps({"prompt": {"lang": "Lang? "}, "live_correlation": {"enable": False}}))

        conf = config.resolve_config()

        self.assertEqual(conf.prompt_for("lang"), "Lang? ")
        self.assertEqual(conf.prompt_for("compiler"), "Select compiler> ")
        self.assertFalse(conf.live_correlation.enable)
        self.assertEqual(conf.live_correlation.highlight_style, "Cursorline")

    def test_overrides_win_over_file(self) -> None:
        self._write(json.dumps({"url": "https://file.example"}))

        conf = config.resolve_config({"url": "https://flag.example"})

        self.assertEqual(conf.url, "https://flag.example")

    def test_malformed_file_is_ignored_with_warning(self) -> None:
        self._write("{not json")

        with self.assertLogs("ceview.config", level="WARNING"):
            self.assertEqual(config.load_config(), {})

    def test_non_object_file_is_ignored(self) -> None:
        self._write("[1, 2]")

        self.assertEqual(config.load_config(), {})

    def test_wrongly_typed_values_fall_back(self) -> None:
        conf = config.config_from_dict(
            {
                "url": 5,
                "prompt": {"lang": 3, "compiler": "C> "},
                "live_correlation": {"enable": "yes", "highlight_style": ""},
                "request_timeout": -1,
                "serialize_compiles": "true",
            }
        )

        self.assertEqual(conf.url, "https://godbolt.org")
        self.assertEqual(conf.prompt_for("lang"), "Select language> ")
        self.assertEqual(conf.prompt_for("compiler"), "C> ")
        self.assertTrue(conf.live_correlation.enable)
        self.assertEqual(conf.live_correlation.highlight_style, "Cursorline")
        self.assertEqual(conf.request_timeout, 30.0)
        self.assertFalse(conf.serialize_compiles)

    def test_save_then_load(self) -> None:
        config.save_config({"url": "https://saved.example"})

        self.assertEqual(config.load_config(), {"url": "https://saved.example"})

    def test_setup_installs_active_config(self) -> None:
        with mock.patch.object(config, "_ACTIVE", None):
            conf = config.setup({"request_timeout": 5})

            self.assertIs(config.get_config(), conf)
            self.assertEqual(conf.request_timeout, 5.0)


class MergeConfigTests(unittest.TestCase):
    def test_nested_merge_does_not_mutate_inputs(self) -> None:
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        override = {"a": {"y": 3}, "c": [1]}

        merged = config.merge_config(base, override)

        self.assertEqual(merged, {"a": {"x": 1, "y": 3}, "b": 1, "c": [1]})
        self.assertEqual(base, {"a": {"x": 1, "y": 2}, "b": 1})

    def test_scalar_override_replaces_table(self) -> None:
        self.assertEqual(config.merge_config({"a": {"x": 1}}, {"a": None}), {"a": None})


class RenderItemTests(unittest.TestCase):
    def test_templates_see_item_fields(self) -> None:
        compiler = Compiler(id="g132", name="x86-64 gcc 13.2", instruction_set="amd64")

        self.assertEqual(config.render_item("{name} [{id}]", compiler), "x86-64 gcc 13.2 [g132]")
        self.assertEqual(config.render_item("{0}", "Google"), "Google")

    def test_bad_template_falls_back(self) -> None:
        compiler = Compiler(id="g132", name="gcc")

        self.assertEqual(config.render_item("{missing}", compiler), "gcc")
        self.assertEqual(config.render_item("{name}", "LLVM"), "LLVM")

    def test_formatter_for_uses_kind_template(self) -> None:
        conf = config.config_from_dict({"format_item": {"compiler": "{id}"}})

        self.assertEqual(conf.formatter_for("compiler")(Compiler(id="g132", name="gcc")), "g132")
        self.assertEqual(conf.formatter_for("compiler_opts")("-O2"), "-O2")


if __name__ == "__main__":
    unittest.main()
