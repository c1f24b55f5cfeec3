"""archforge command line interface.

Commands:
    generate   Translate an architecture document into IaC files
    formats    List the supported formats and their providers
    config     Show or initialise the settings file
"""

import json
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
import structlog
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfigError, ConfigLoader, GeneratorSettings
from .exceptions import ArchForgeError
from .iac.cli_handler import load_architectures, select_architecture, write_files
from .iac.formats import get_supported_formats
from .iac.generator import IaCGenerator
from .iac.mappings import build_default_registry
from .logging_config import configure_logging
from .models import CloudProvider, Environment, IaCFormat

console = Console()
logger = structlog.get_logger(__name__)


def _fail(error: Exception) -> NoReturn:
    """Echo an error to stderr and exit with status 1."""
    if isinstance(error, ArchForgeError):
        click.echo(f"Error: {error.message}", err=True)
        if error.recovery_suggestion:
            click.echo(f"Hint: {error.recovery_suggestion}", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _load_settings(ctx: click.Context) -> GeneratorSettings:
    loader = ConfigLoader(ctx.obj.get("config_path"))
    try:
        settings = loader.load()
    except ConfigError as e:
        _fail(e)
    configure_logging(ctx.obj.get("log_level") or settings.log_level)
    return settings


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level (overrides the settings file)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (default: $ARCHFORGE_CONFIG_PATH or ~/.config/archforge/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], config_path: Optional[Path]) -> None:
    """archforge - compile cloud architectures into Infrastructure-as-Code."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument(
    "architecture_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--format",
    "iac_format",
    type=click.Choice([f.value for f in IaCFormat]),
    default=None,
    help="Target IaC format",
)
@click.option(
    "--provider",
    type=click.Choice([p.value for p in CloudProvider]),
    default=None,
    help="Target cloud provider",
)
@click.option("--region", default=None, help="Region (default: the provider's default region)")
@click.option("--project-name", default=None, help="Project name used in names and tags")
@click.option(
    "--environment",
    type=click.Choice([e.value for e in Environment]),
    default=None,
    help="Deployment environment",
)
@click.option("--variant", default=None, help="Select the architecture with this variant")
@click.option("--index", type=int, default=None, help="Select the architecture at this position")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory to write files to",
)
@click.option("--overwrite", is_flag=True, help="Overwrite existing files")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print files instead of writing them")
@click.option("--report", "show_report", is_flag=True, help="Print the generation report")
@click.pass_context
def generate(
    ctx: click.Context,
    architecture_file: Path,
    iac_format: Optional[str],
    provider: Optional[str],
    region: Optional[str],
    project_name: Optional[str],
    environment: Optional[str],
    variant: Optional[str],
    index: Optional[int],
    output_dir: Optional[Path],
    overwrite: bool,
    to_stdout: bool,
    show_report: bool,
) -> None:
    """Generate IaC files for an architecture document.

    ARCHITECTURE_FILE is a JSON or YAML document holding one architecture,
    a list of them, or an object with an ``architectures`` list.

    Examples:
        archforge generate arch.json --format terraform --provider gcp
        archforge generate result.yaml --variant balanced --format kubernetes --stdout
    """
    if variant is not None and index is not None:
        raise click.UsageError("--variant and --index are mutually exclusive")

    settings = _load_settings(ctx)
    try:
        settings = ConfigLoader(ctx.obj.get("config_path")).merge_cli_args(
            settings,
            {
                "default_format": iac_format,
                "default_environment": environment,
                "project_name": project_name,
                "output": {"directory": output_dir, "overwrite": overwrite or None},
            },
        )
        architecture = select_architecture(
            load_architectures(architecture_file), variant=variant, index=index
        )
        request = settings.build_generator_config(
            provider=CloudProvider(provider) if provider else None,
            region=region,
            fallback_project_name=architecture.name,
        )
        result = IaCGenerator().generate_with_report(architecture, request)
    except ArchForgeError as e:
        logger.error("generation_failed", error=e.to_dict())
        _fail(e)

    report = result.report
    logger.info(
        "generation_complete",
        format=report.iac_format,
        provider=report.provider,
        files=report.files,
        resources=report.resources_generated,
    )

    if to_stdout:
        for generated in result.files:
            click.echo(f"# ===== {generated.filename} ({generated.language}) =====")
            click.echo(generated.content, nl=False)
    else:
        try:
            written = write_files(
                result.files, settings.output.directory, overwrite=settings.output.overwrite
            )
        except (ArchForgeError, ValueError, OSError) as e:
            _fail(e)
        console.print(
            f"[green]Wrote {len(written)} file(s) to {escape(str(settings.output.directory))}[/green]"
        )
        for path in written:
            console.print(f"  {escape(path.name)}")

    if not report.is_complete:
        click.echo(
            f"Warning: output is incomplete, {len(report.unmapped)} component(s) "
            f"handled by fallback '{report.fallback_policy}':",
            err=True,
        )
        for component in report.unmapped:
            click.echo(f"  - {component.describe()}", err=True)

    if show_report:
        click.echo(report.format_report())


@cli.command()
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def formats(output_json: bool) -> None:
    """List supported IaC formats and their compatible providers."""
    specs = get_supported_formats()

    if output_json:
        registry = build_default_registry()
        entries = []
        for spec in specs:
            entry = spec.to_dict()
            entry["service_types"] = {
                p.value: registry.supported_service_types(spec.format, p)
                for p in spec.providers
            }
            entries.append(entry)
        click.echo(json.dumps(entries, indent=2))
        return

    table = Table(title="Supported IaC Formats")
    table.add_column("Format", style="cyan")
    table.add_column("Name")
    table.add_column("Extension")
    table.add_column("Language")
    table.add_column("Providers", style="green")
    for spec in specs:
        table.add_row(
            spec.format.value,
            spec.display_name,
            f".{spec.extension}",
            spec.language,
            ", ".join(p.value for p in spec.providers),
        )
    console.print(table)


@cli.group()
def config() -> None:
    """Show or initialise archforge settings."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the effective settings (file, environment and defaults merged)."""
    settings = _load_settings(ctx)
    click.echo(yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False), nl=False)


@config.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing settings file")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Write a commented default settings file."""
    try:
        path = ConfigLoader(ctx.obj.get("config_path")).create_default_config(force=force)
    except ConfigError as e:
        _fail(e)
    click.echo(f"Wrote default settings to {path}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
