# packsbuilder/cli.py
from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer

from packsbuilder.app.settings import PackSettings, loadSettings
from packsbuilder.core.errors import DirectoryNotFound, SettingsError
from packsbuilder.core.logging import configureLogging, setLogContext
from packsbuilder.packs.pipeline import PackPipeline

__all__ = ["app", "main"]


app = typer.Typer(
    name="packsbuilder",
    help="Build pack archives, defaults files and the master pack index.",
    no_args_is_help=True,
    add_completion=False,
)



def _pipeline(ctx: typer.Context) -> PackPipeline:
    return ctx.ensure_object(dict)["pipeline"]



@app.callback()
def configure(
    ctx: typer.Context,
    baseUrl: Annotated[Optional[str], typer.Option("--base-url", help="Base URL archives are downloaded from.")] = None,
    outputDir: Annotated[Optional[str], typer.Option("--output-dir", help="Where archives and the index are written.")] = None,
    config: Annotated[Optional[Path], typer.Option("--config", help="json5 settings file (default: ./packsbuilder.json5).")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log at DEBUG level.")] = False,
) -> None:
    try:
        settings = loadSettings(config, overrides={"baseDownloadUrl": baseUrl, "outputDirectory": outputDir})
    except SettingsError as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=2) from err

    configureLogging("DEBUG" if verbose else settings.logLevel, settings.logFile)
    setLogContext(command=ctx.invoked_subcommand)
    ctx.ensure_object(dict)["pipeline"] = PackPipeline(settings)



def _echoSettings(settings: PackSettings) -> None:
    typer.echo("Current Configuration:")
    typer.echo(f"  Base Download URL: {settings.baseDownloadUrl}")
    typer.echo(f"  Output Directory: {settings.outputDirectory}")
    typer.echo("")



@app.command("discover")
def discoverCommand(
    ctx: typer.Context,
    root: Annotated[Path, typer.Argument(help="Folder whose subfolders are packs.")],
) -> None:
    """List the pack folders found under ROOT."""
    pipeline = _pipeline(ctx)
    try:
        packs = pipeline.discoverPacks(root)
    except DirectoryNotFound as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1) from err

    if not packs:
        typer.echo("No pack folders with manifest.json found.")
        return
    for packDir, manifest in packs:
        if manifest is None:
            typer.echo(f"{packDir.name}: unreadable manifest")
        else:
            typer.echo(f"{packDir.name}: {manifest.international_name} v{manifest.version}")



@app.command("defaults")
def defaultsCommand(
    ctx: typer.Context,
    packDir: Annotated[Path, typer.Argument(help="Pack folder containing manifest.json.")],
) -> None:
    """Create or extend PACK_DIR/defaults.json from the pack's images."""
    pipeline = _pipeline(ctx)
    if not packDir.is_dir():
        typer.echo(f"Error: Directory not found: {packDir}", err=True)
        raise typer.Exit(code=1)

    manifest = pipeline.discovery.readManifest(packDir)
    if manifest is None:
        typer.echo("Error: No manifest.json found in the specified folder.", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Pack: {manifest.international_name} v{manifest.version}")
    typer.echo(f"Initializing/updating {pipeline.settings.defaultsFilename}...")
    try:
        report = pipeline.initializeDefaults(packDir)
    except OSError as err:
        typer.echo(f"Error: cannot write defaults: {err}", err=True)
        raise typer.Exit(code=1) from err
    for line in report.lines():
        typer.echo(line)



@app.command("build")
def buildCommand(
    ctx: typer.Context,
    root: Annotated[Path, typer.Argument(help="Folder whose subfolders are packs.")],
) -> None:
    """Zip every pack under ROOT and update the master index."""
    pipeline = _pipeline(ctx)
    _echoSettings(pipeline.settings)
    try:
        batch = pipeline.buildAll(root)
    except DirectoryNotFound as err:
        typer.echo(f"Error: {err}", err=True)
        raise typer.Exit(code=1) from err

    if batch.total == 0:
        typer.echo("No pack folders with manifest.json found.")
        raise typer.Exit(code=1)

    for outcome in batch.outcomes:
        status = "ok" if outcome.success else "FAILED"
        detail = outcome.archive.archivePath.name if outcome.archive.archivePath else (outcome.error or "")
        typer.echo(f"  [{status}] {outcome.packDir.name} {detail}".rstrip())
    typer.echo(batch.summary())
    if batch.succeeded != batch.total:
        raise typer.Exit(code=1)



@app.command("rebuild-index")
def rebuildIndexCommand(ctx: typer.Context) -> None:
    """Regenerate the master index by scanning existing zip files."""
    pipeline = _pipeline(ctx)
    catalog = pipeline.rebuildCatalog()
    if catalog is None:
        typer.echo("Output directory does not exist. No zips to scan.")
        raise typer.Exit(code=1)
    typer.echo(f"Regenerated master index with {len(catalog.packs)} pack(s).")



def main() -> None:
    app()
