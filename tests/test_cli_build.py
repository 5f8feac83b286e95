from __future__ import annotations

from pathlib import Path
import io
import json
import tempfile
import textwrap
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch

from napi_cli import cli
from napi_core.command_runner import CommandError, CommandResult


HOST = "x86_64-unknown-linux-gnu"


class BuildArgumentParsingTests(unittest.TestCase):
    def test_passthrough_arguments_after_separator(self) -> None:
        args = cli._parse_arguments(["build", "--release", "-p", "crate_a", "--", "--locked", "-p", "x"])
        self.assertEqual(args.bypass_flags, ["--locked", "-p", "x"])
        self.assertEqual(args.packages, ["crate_a"])
        self.assertTrue(args.release)

    def test_features_accept_commas_and_repeats(self) -> None:
        args = cli._parse_arguments(["build", "-F", "a,b", "--features", "c d", "-F", "a"])
        request = cli._build_request(args)
        self.assertEqual(request.features.features, ["a", "b", "c", "d"])

    def test_all_is_alias_for_workspace(self) -> None:
        request = cli._build_request(cli._parse_arguments(["build", "--all", "--exclude", "skip"]))
        self.assertTrue(request.workspace.workspace)
        self.assertEqual(request.workspace.exclude, ["skip"])

    def test_request_carries_non_argument_flags(self) -> None:
        args = cli._parse_arguments(
            [
                "build",
                "--js", "binding.js",
                "--no-js",
                "-d", "dist",
                "-s",
                "--pipe", "prettier -w",
                "-z",
                "--zig-abi-suffix", "2.17",
                "--cwd", "crates/addon",
            ]
        )
        request = cli._build_request(args)
        self.assertEqual(request.js_binding, Path("binding.js"))
        self.assertTrue(request.disable_js_binding)
        self.assertEqual(request.dest, Path("dist"))
        self.assertTrue(request.strip)
        self.assertEqual(request.pipe, "prettier -w")
        self.assertTrue(request.zig)
        self.assertEqual(request.zig_abi_suffix, "2.17")
        self.assertEqual(request.cwd, Path("crates/addon"))

    def test_invalid_arguments_exit_non_zero(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["build", "--no-such-flag"])
        self.assertNotEqual(ctx.exception.code, 0)

    def test_passthrough_rejected_for_new(self) -> None:
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                cli.main(["new", "demo", "--", "--locked"])


class BuildCommandDryRunTests(unittest.TestCase):
    def test_dry_run_prints_cargo_command(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = cli.main(
                ["build", "--dry-run", "--release", "--target", HOST, "-p", "crate_a", "--", "--locked"]
            )
        self.assertEqual(code, 0)
        output = buffer.getvalue()
        command_line = output.splitlines()[0]
        self.assertEqual(
            command_line,
            f"[dry-run] (cwd={Path.cwd()}) cargo build -p crate_a --target {HOST} --locked",
        )
        self.assertEqual(command_line.count("cargo build"), 1)
        self.assertIn("TYPE_DEF_TMP_PATH=", output)

    def test_dry_run_detects_host_target(self) -> None:
        buffer = io.StringIO()
        with patch("napi_cli.build.resolve_target", return_value=HOST) as resolve:
            with redirect_stdout(buffer):
                code = cli.main(["build", "--dry-run"])
        self.assertEqual(code, 0)
        resolve.assert_called_once()
        self.assertIn(f"--target {HOST}", buffer.getvalue())

    def test_dry_run_includes_windows_workaround(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            cli.main(["build", "--dry-run", "-t", "i686-pc-windows-msvc", "--disable-windows-x32-optimize"])
        output = buffer.getvalue()
        self.assertIn("CARGO_PROFILE_DEBUG_CODEGEN_UNITS=256", output)
        self.assertIn("CARGO_PROFILE_RELEASE_CODEGEN_UNITS=256", output)
        self.assertIn("CARGO_PROFILE_RELEASE_LTO=off", output)

    def test_verbose_traces_to_stdout(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            cli.main(["build", "--dry-run", "-v", "-t", HOST, "--all-features"])
        self.assertIn("[TRACE] set features flags: ['--all-features']", buffer.getvalue())

    def test_quiet_by_default(self) -> None:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            cli.main(["build", "--dry-run", "-t", HOST])
        self.assertNotIn("[TRACE]", buffer.getvalue())


class BuildCommandSpawnTests(unittest.TestCase):
    def test_spawns_cargo_without_waiting(self) -> None:
        with patch("napi_core.command_runner.subprocess.Popen") as popen:
            code = cli.main(["build", "-t", HOST, "--", "--locked"])
        self.assertEqual(code, 0)
        command = popen.call_args.args[0]
        self.assertEqual(command, ["cargo", "build", "--target", HOST, "--locked"])
        popen.return_value.wait.assert_not_called()

    def test_spawn_failure_exits_with_one(self) -> None:
        stderr = io.StringIO()
        with patch("napi_core.command_runner.subprocess.Popen", side_effect=FileNotFoundError("cargo")):
            with redirect_stderr(stderr):
                code = cli.main(["build", "-t", HOST])
        self.assertEqual(code, 1)
        self.assertIn("Error: Failed to start command: cargo build", stderr.getvalue())

    def test_host_detection_failure_exits_with_one(self) -> None:
        failure = CommandError(CommandResult(["rustc", "-vV"], -1, "", ""), reason="rustc not found")
        stderr = io.StringIO()
        with patch("napi_core.command_runner.SubprocessCommandRunner.run", side_effect=failure):
            with patch("napi_core.command_runner.subprocess.Popen") as popen:
                with redirect_stderr(stderr):
                    code = cli.main(["build"])
        self.assertEqual(code, 1)
        popen.assert_not_called()
        self.assertIn("Failed to detect the host target", stderr.getvalue())


class BuildConfigurationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_toml_defaults_fill_unset_options(self) -> None:
        config = self.root / "napi.toml"
        config.write_text(
            textwrap.dedent(
                """
                [build]
                target = "aarch64-apple-darwin"
                features = ["serde"]
                packages = ["core"]
                cargo_flags = ["--locked"]
                """
            )
        )
        args = cli._parse_arguments(["build", "-c", str(config), "--", "-j", "2"])
        request = cli._build_request(args, cli.load_build_defaults(config))
        self.assertEqual(request.target, "aarch64-apple-darwin")
        self.assertEqual(request.features.features, ["serde"])
        self.assertEqual(request.workspace.packages, ["core"])
        self.assertEqual(request.bypass_flags, ["--locked", "-j", "2"])

    def test_cli_values_override_configuration(self) -> None:
        config = self.root / "package.json"
        config.write_text(
            json.dumps({"name": "demo", "napi": {"build": {"target": "aarch64-apple-darwin", "features": ["a"]}}})
        )
        args = cli._parse_arguments(["build", "-c", str(config), "-t", HOST, "-F", "b"])
        request = cli._build_request(args, cli.load_build_defaults(config))
        self.assertEqual(request.target, HOST)
        self.assertEqual(request.features.features, ["b"])

    def test_cli_features_replace_configured_all_features(self) -> None:
        config = self.root / "napi.toml"
        config.write_text("[build]\nall_features = true\nno_default_features = true\n")
        args = cli._parse_arguments(["build", "-c", str(config), "-t", HOST, "-F", "foo"])
        request = cli._build_request(args, cli.load_build_defaults(config))
        self.assertFalse(request.features.all_features)
        self.assertFalse(request.features.no_default_features)
        self.assertEqual(request.features.to_args(), ["--features", "foo"])

    def test_cli_no_default_features_replaces_configured_list(self) -> None:
        config = self.root / "napi.toml"
        config.write_text('[build]\nfeatures = ["serde"]\n')
        args = cli._parse_arguments(["build", "-c", str(config), "-t", HOST, "--no-default-features"])
        request = cli._build_request(args, cli.load_build_defaults(config))
        self.assertEqual(request.features.features, [])
        self.assertEqual(request.features.to_args(), ["--no-default-features"])

    def test_cli_packages_replace_configured_workspace(self) -> None:
        config = self.root / "napi.toml"
        config.write_text('[build]\nworkspace = true\nexclude = ["bench"]\n')
        args = cli._parse_arguments(["build", "-c", str(config), "-t", HOST, "-p", "crate_a"])
        request = cli._build_request(args, cli.load_build_defaults(config))
        self.assertFalse(request.workspace.workspace)
        self.assertEqual(request.workspace.to_args(), ["-p", "crate_a", "--exclude", "bench"])

    def test_configured_selection_applies_without_cli_flags(self) -> None:
        config = self.root / "napi.toml"
        config.write_text("[build]\nall_features = true\nworkspace = true\n")
        args = cli._parse_arguments(["build", "-c", str(config), "-t", HOST])
        request = cli._build_request(args, cli.load_build_defaults(config))
        self.assertEqual(request.features.to_args(), ["--all-features"])
        self.assertEqual(request.workspace.to_args(), ["--workspace"])

    def test_malformed_configuration_exits_with_one(self) -> None:
        config = self.root / "napi.toml"
        config.write_text("[build\ntarget = 1\n")
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = cli.main(["build", "--dry-run", "-c", str(config), "-t", HOST])
        self.assertEqual(code, 1)
        self.assertIn("Cannot parse configuration file", stderr.getvalue())

    def test_invalid_configuration_exits_with_one(self) -> None:
        config = self.root / "napi.json"
        config.write_text(json.dumps({"build": {"unknown_key": True}}))
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = cli.main(["build", "--dry-run", "-c", str(config), "-t", HOST])
        self.assertEqual(code, 1)
        self.assertIn("unknown keys: unknown_key", stderr.getvalue())


if __name__ == "__main__":
    unittest.main()
