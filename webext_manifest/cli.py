"""CLI entrypoints for building extension manifests."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Callable, TypeVar

import typer
from rich.console import Console

from . import __version__
from .bundle import OutputBundle, load_vite_manifest
from .config import PluginOptions, load_options
from .errors import ManifestBuildError
from .parser import ParseResult, create_manifest_parser
from .writer import write_build

console = Console()
app = typer.Typer(help="Build browser-loadable extension manifests from bundler output.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to the options file (YAML or JSON)."),
]

T = TypeVar("T")

DEFAULT_BUNDLE_MANIFEST = Path("dist/.vite/manifest.json")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"webext-manifest {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log per-file decisions."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def inputs(
    config_path: ConfigPathOption = "webext.yml",
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print inputs as a JSON object for the bundler's input option."),
    ] = False,
) -> None:
    """List every file the manifest needs compiled."""
    options = _load(config_path)
    result = _run(lambda: create_manifest_parser(options).parse_input())

    if as_json:
        typer.echo(json.dumps(result.rollup_input(), indent=2))
        return

    for output_file, input_file in result.input_scripts:
        console.print(f"[bold green]{output_file}[/] <- {input_file}")
    console.print(f"[bold blue]Summary[/]: {len(result.input_scripts)} input(s).")


@app.command()
def build(
    config_path: ConfigPathOption = "webext.yml",
    bundle_manifest: Annotated[
        Path | None,
        typer.Option(
            "--bundle-manifest",
            "-b",
            help="Vite build manifest describing the compiled chunks (default: dist/.vite/manifest.json).",
        ),
    ] = None,
    out_dir: Annotated[
        Path | None,
        typer.Option("--out-dir", "-o", help="Directory receiving manifest.json and emitted files (default: dist)."),
    ] = None,
) -> None:
    """Rewrite the manifest against compiled output and write it to the build directory."""
    options = _load(config_path)
    bundle_path = bundle_manifest or options.root / DEFAULT_BUNDLE_MANIFEST
    destination = out_dir or options.root / "dist"

    bundle = _load_bundle(bundle_path, options)
    parser = create_manifest_parser(options)
    _run(parser.parse_input)
    result = _run(lambda: asyncio.run(parser.parse_output(bundle)))

    written = write_build(result, destination)
    _print_build_summary(result, written, destination)


def _load(path: str) -> PluginOptions:
    try:
        return load_options(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {exc.filename or path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _load_bundle(path: Path, options: PluginOptions) -> OutputBundle:
    try:
        return load_vite_manifest(path, options.root)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Bundle manifest not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _run(step: Callable[[], T]) -> T:
    try:
        return step()
    except ManifestBuildError as exc:
        console.print(f"[bold red]Build failed[/]: {exc}")
        raise typer.Exit(code=1) from exc


def _print_build_summary(result: ParseResult, written: list[Path], destination: Path) -> None:
    manifest = result.manifest
    resources = manifest.get("web_accessible_resources") or []
    console.print(
        "[bold green]Manifest[/]: "
        f"V{manifest.get('manifest_version')} with {len(manifest.get('content_scripts') or [])} content script(s), "
        f"{len(resources)} web accessible resource entr{'y' if len(resources) == 1 else 'ies'}"
    )
    for emitted in result.emit_files:
        console.print(f"[bold green]Emitted[/]: {emitted.file_name}")
    console.print(f"[bold blue]Written[/]: {len(written)} file(s) to {destination}")
