import tempfile
import textwrap
import unittest
from pathlib import Path

from app_config import (
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class AppConfigLoadingTests(unittest.TestCase):
    def test_load_app_config_reads_pomodoro_and_server_sections(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(
                config_path,
                textwrap.dedent(
                    """
                    [pomodoro]
                    working_seconds = 5
                    short_break_seconds = 3
                    long_break_seconds = 4
                    tick_seconds = 1
                    long_break_interval = 2
                    continuous = false
                    until = 3

                    [event_server]
                    enabled = true
                    port = 9001
                    """
                ).strip(),
            )

            app_config = load_app_config(str(config_path), environ={})

            self.assertEqual(str(config_path), app_config.source_file)
            settings = app_config.pomodoro
            self.assertEqual(5.0, settings.working_seconds)
            self.assertEqual(3.0, settings.short_break_seconds)
            self.assertEqual(4.0, settings.long_break_seconds)
            self.assertEqual(1.0, settings.tick_seconds)
            self.assertEqual(2, settings.long_break_interval)
            self.assertFalse(settings.continuous)
            self.assertEqual(3, settings.until)
            self.assertTrue(app_config.event_server.enabled)
            self.assertEqual("127.0.0.1", app_config.event_server.host)
            self.assertEqual(9001, app_config.event_server.port)

    def test_missing_sections_use_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "")

            app_config = load_app_config(str(config_path), environ={})

            self.assertEqual(25 * 60, app_config.pomodoro.working_seconds)
            self.assertEqual(4, app_config.pomodoro.long_break_interval)
            self.assertTrue(app_config.pomodoro.continuous)
            self.assertIsNone(app_config.pomodoro.until)
            self.assertFalse(app_config.event_server.enabled)

    def test_explicit_missing_file_is_an_error(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            missing = Path(temp_dir) / "nope.toml"
            with self.assertRaises(AppConfigurationError):
                load_app_config(str(missing), environ={})
            with self.assertRaises(AppConfigurationError):
                load_app_config(environ={"APP_CONFIG_FILE": str(missing)})

    def test_env_var_selects_config_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "custom.toml"
            _write_text(config_path, "[pomodoro]\nlong_break_interval = 3\n")

            path, explicit = resolve_config_path(environ={"APP_CONFIG_FILE": str(config_path)})
            app_config = load_app_config(environ={"APP_CONFIG_FILE": str(config_path)})

            self.assertEqual(config_path.resolve(), path)
            self.assertTrue(explicit)
            self.assertEqual(3, app_config.pomodoro.long_break_interval)

    def test_rejects_zero_long_break_interval(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[pomodoro]\nlong_break_interval = 0\n")

            with self.assertRaises(AppConfigurationError) as context:
                load_app_config(str(config_path), environ={})

            self.assertIn("pomodoro.long_break_interval", str(context.exception))

    def test_rejects_all_zero_durations(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(
                config_path,
                "[pomodoro]\nworking_seconds = 0\nshort_break_seconds = 0\n"
                "long_break_seconds = 0\n",
            )

            with self.assertRaises(AppConfigurationError) as context:
                load_app_config(str(config_path), environ={})

            self.assertIn("cannot all be zero", str(context.exception))

    def test_rejects_wrong_types(self) -> None:
        cases = {
            "continuous = 3": "pomodoro.continuous",
            "tick_seconds = \"fast\"": "pomodoro.tick_seconds",
            "until = 1.5": "pomodoro.until",
            "tick_seconds = 0": "pomodoro.tick_seconds",
        }
        for line, field in cases.items():
            with self.subTest(line=line):
                with tempfile.TemporaryDirectory() as temp_dir:
                    config_path = Path(temp_dir) / "config.toml"
                    _write_text(config_path, f"[pomodoro]\n{line}\n")

                    with self.assertRaises(AppConfigurationError) as context:
                        load_app_config(str(config_path), environ={})

                    self.assertIn(field, str(context.exception))

    def test_invalid_toml_is_reported(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[pomodoro\n")

            with self.assertRaises(AppConfigurationError):
                load_app_config(str(config_path), environ={})


if __name__ == "__main__":
    unittest.main()
