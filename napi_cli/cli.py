"""Command line interface for the napi tool."""
from __future__ import annotations

from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Iterable, List, Sequence
import sys

from napi_core.command_runner import CommandError, RecordingCommandRunner, SubprocessCommandRunner
from napi_core.config_loader import ConfigError
from napi_core.console import Console
from napi_core.template import TemplateError
from .build import BuildCommand, BuildRequest, FeatureSelection, WorkspaceSelection
from .config import BuildDefaults, load_build_defaults
from .new import NewCommand, NewOptions, ScaffoldError
from .target import TargetDetectionError


def _split_passthrough(argv: Sequence[str]) -> tuple[List[str], List[str]]:
    args = list(argv)
    if "--" in args:
        index = args.index("--")
        return args[:index], args[index + 1:]
    return args, []


def _split_list_values(values: Iterable[str] | None) -> List[str]:
    """Flatten repeated ``-F a,b -F "c d"`` style values."""
    parts: List[str] = []
    for value in values or []:
        if not value:
            continue
        for segment in value.replace(",", " ").split():
            if segment not in parts:
                parts.append(segment)
    return parts


def _build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="napi", description="Build and scaffold napi-rs native addons")
    subparsers = parser.add_subparsers(dest="command", required=True)

    new_parser = subparsers.add_parser("new", help="Create a new napi-rs project")
    new_parser.add_argument("path", type=Path, help="Directory the project is created in")
    new_parser.add_argument("-n", "--name", help="npm package name (defaults to the directory name)")
    new_parser.add_argument(
        "--min-node-api",
        dest="min_node_api_version",
        type=int,
        default=4,
        help="Minimum Node-API version supported by the addon (1-8)",
    )
    new_parser.add_argument("-l", "--license", default="MIT", help="License of the generated package")
    new_parser.add_argument(
        "-t",
        "--targets",
        action="append",
        default=[],
        metavar="TRIPLE",
        help="Additional target triples to publish (repeatable)",
    )
    new_parser.add_argument(
        "--no-default-targets",
        dest="enable_default_targets",
        action="store_false",
        help="Do not include the default target triples",
    )
    new_parser.add_argument("--enable-all-targets", action="store_true", help="Publish for every supported target")
    new_parser.add_argument(
        "--no-type-def",
        dest="enable_type_def",
        action="store_false",
        help="Disable TypeScript definition generation in napi-derive",
    )
    new_parser.add_argument("--dry-run", action="store_true", help="List the files that would be created")
    new_parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose output")

    build_parser = subparsers.add_parser(
        "build",
        help="Build the napi-rs crate",
        description="All arguments after `--` are passed to `cargo build` unchanged.",
    )
    build_parser.add_argument("-t", "--target", help="Build for the target triple, passed to `cargo build --target`")
    build_parser.add_argument(
        "--js",
        dest="js_binding",
        type=Path,
        help="Path of the generated JS binding file. Only works together with --target",
    )
    build_parser.add_argument("--no-js", dest="disable_js_binding", action="store_true", help="Disable JS binding file generation")
    build_parser.add_argument("--cwd", type=Path, help="Directory containing the `Cargo.toml` manifest")
    build_parser.add_argument("-d", "--dest", type=Path, help="Directory where all built files are put")
    build_parser.add_argument("-s", "--strip", action="store_true", help="Strip the library to minimize file size")
    build_parser.add_argument("--pipe", help='Command that receives generated js/ts files, e.g. --pipe="prettier -w"')
    build_parser.add_argument("-r", "--release", action="store_true", help="Build in release mode")
    build_parser.add_argument("-v", "--verbose", action="store_true", help="Log the build command trace")
    build_parser.add_argument("--all-features", action="store_true", help="Activate all available features")
    build_parser.add_argument("--no-default-features", action="store_true", help="Do not activate the `default` feature")
    build_parser.add_argument(
        "-F",
        "--features",
        action="append",
        default=[],
        metavar="FEATURES",
        help="Space or comma separated list of features to activate (repeatable)",
    )
    build_parser.add_argument("--workspace", action="store_true", help="Build all packages in the workspace")
    build_parser.add_argument("--all", dest="workspace", action="store_true", help="Alias for --workspace")
    build_parser.add_argument(
        "-p",
        "--package",
        dest="packages",
        action="append",
        default=[],
        metavar="SPEC",
        help="Package to build (repeatable)",
    )
    build_parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="SPEC",
        help="Exclude packages from the build (repeatable)",
    )
    build_parser.add_argument(
        "--disable-windows-x32-optimize",
        action="store_true",
        help="Disable LTO and raise codegen-units for i686-pc-windows-msvc (napi-rs/napi-rs#297)",
    )
    build_parser.add_argument("-z", "--zig", action="store_true", help="[experimental] Use zig as linker (cross-compile)")
    build_parser.add_argument("--zig-abi-suffix", help="[experimental] Suffix of the zig ABI version, e.g. 2.17")
    build_parser.add_argument("-c", "--config", type=Path, help="Configuration file with build defaults")
    build_parser.add_argument("--dry-run", action="store_true", help="Print the cargo command without running it")

    return parser


def _parse_arguments(argv: Iterable[str]) -> Namespace:
    own_args, bypass_flags = _split_passthrough(list(argv))
    parser = _build_parser()
    args = parser.parse_args(own_args)
    if bypass_flags and args.command != "build":
        parser.error("arguments after `--` are only accepted by `napi build`")
    args.bypass_flags = bypass_flags
    return args


def _make_console(args: Namespace) -> Console:
    return Console("trace" if getattr(args, "verbose", False) else "info")


def _feature_selection(args: Namespace, defaults: BuildDefaults) -> FeatureSelection:
    # Any feature flag on the command line replaces the configured selection as a whole.
    features = _split_list_values(args.features)
    if args.all_features or args.no_default_features or features:
        return FeatureSelection(
            all_features=args.all_features,
            no_default_features=args.no_default_features,
            features=features,
        )
    return FeatureSelection(
        all_features=defaults.all_features,
        no_default_features=defaults.no_default_features,
        features=list(defaults.features),
    )


def _workspace_selection(args: Namespace, defaults: BuildDefaults) -> WorkspaceSelection:
    packages = _split_list_values(args.packages)
    exclude = _split_list_values(args.exclude) or list(defaults.exclude)
    if args.workspace or packages:
        return WorkspaceSelection(workspace=args.workspace, packages=packages, exclude=exclude)
    return WorkspaceSelection(workspace=defaults.workspace, packages=list(defaults.packages), exclude=exclude)


def _build_request(args: Namespace, defaults: BuildDefaults | None = None) -> BuildRequest:
    defaults = defaults or BuildDefaults()
    return BuildRequest(
        target=args.target or defaults.target,
        js_binding=args.js_binding,
        disable_js_binding=args.disable_js_binding,
        cwd=args.cwd,
        dest=args.dest,
        strip=args.strip,
        pipe=args.pipe,
        release=args.release,
        verbose=args.verbose,
        features=_feature_selection(args, defaults),
        workspace=_workspace_selection(args, defaults),
        disable_windows_x32_optimize=args.disable_windows_x32_optimize or defaults.disable_windows_x32_optimize,
        zig=args.zig,
        zig_abi_suffix=args.zig_abi_suffix,
        bypass_flags=[*defaults.cargo_flags, *args.bypass_flags],
        dry_run=args.dry_run,
    )


def main(argv: Iterable[str] | None = None) -> int:
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    console = _make_console(args)

    try:
        if args.command == "build":
            return _handle_build(args, console)
        if args.command == "new":
            return _handle_new(args, console)
    except (CommandError, TargetDetectionError, ScaffoldError, TemplateError, ConfigError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    raise ValueError(f"Unknown command: {args.command}")


def _handle_build(args: Namespace, console: Console) -> int:
    defaults = load_build_defaults(args.config) if args.config else None
    request = _build_request(args, defaults)
    if request.zig:
        console.warn("--zig is experimental and is not applied to the cargo invocation yet")

    runner = RecordingCommandRunner() if request.dry_run else SubprocessCommandRunner()
    BuildCommand(request, console=console, runner=runner).execute()

    if isinstance(runner, RecordingCommandRunner):
        for line in runner.iter_formatted(workspace=Path.cwd()):
            print(line)
    return 0


def _handle_new(args: Namespace, console: Console) -> int:
    options = NewOptions(
        path=args.path,
        name=args.name,
        min_node_api_version=args.min_node_api_version,
        license=args.license,
        targets=_split_list_values(args.targets),
        enable_default_targets=args.enable_default_targets,
        enable_all_targets=args.enable_all_targets,
        enable_type_def=args.enable_type_def,
        dry_run=args.dry_run,
    )
    files = NewCommand(options, console=console).execute()
    if options.dry_run:
        for item in files:
            print(f"[dry-run] write {item.path}")
    return 0
