"""CLI interface for mzguard."""

import json
import sys
from pathlib import Path
from typing import Optional

import click
import yaml

from mzguard import __version__
from mzguard.cli.formatters import OutputFormatter
from mzguard.core.config import USER_CONFIG_PATH, Config
from mzguard.core.logging import configure_logging
from mzguard.schemas.plugins import ConflictReport, ProjectAnalysis

EXIT_FAIL_ON = 2


def _log_options(func):
    """Attach the shared logging options to a command."""
    func = click.option(
        "--json-logging", is_flag=True, default=False, help="Output logs in JSON format"
    )(func)
    func = click.option(
        "--log-file", type=click.Path(), default=None, help="Path to log file (default: stderr only)"
    )(func)
    func = click.option(
        "--log-level",
        default="WARNING",
        type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
        help="Logging level (default: WARNING)",
    )(func)
    return func


def _report_options(func):
    """Attach the options shared by commands that produce an analysis report."""
    func = click.option(
        "--fail-on",
        type=click.Choice(["never", "info", "warning"], case_sensitive=False),
        default=None,
        help="Exit with status 2 when conflicts of this severity or higher exist (default: never)",
    )(func)
    func = click.option(
        "--output", "-o", type=click.Path(writable=True), default=None, help="Output file (default: stdout)"
    )(func)
    func = click.option(
        "--format",
        "-f",
        "output_format",
        type=click.Choice(["markdown", "json", "table"], case_sensitive=False),
        default=None,
        help="Output format (default: markdown; table prints to the terminal only)",
    )(func)
    func = click.option(
        "--threshold",
        type=float,
        default=None,
        help="Class popularity at or above which a conflict is a warning (default: 10)",
    )(func)
    func = click.option(
        "--popularity",
        "popularity_file",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="Class popularity file (.json/.yaml): flat scores, class catalog or enrichment output",
    )(func)
    return func


def conflict_exit_code(report: Optional[ConflictReport], fail_on: str) -> int:
    """Exit status for ``--fail-on``."""
    if report is None or fail_on == "never":
        return 0
    if fail_on == "warning":
        failed = any(c.severity == "warning" for c in report.conflicts)
    else:
        failed = bool(report.conflicts)
    return EXIT_FAIL_ON if failed else 0


def _emit(analysis: ProjectAnalysis, output_format: str, output: Optional[str], verbose: bool) -> None:
    """Render an analysis to stdout or a file."""
    from mzguard.analysis.report_generator import ReportGenerator

    generator = ReportGenerator()

    if output_format == "table" and not output:
        OutputFormatter().print_analysis_tables(analysis)
        return

    if output_format == "json":
        report_text = generator.generate_json(analysis)
    else:
        report_text = generator.generate_markdown(analysis)

    if output:
        output_path = Path(output).expanduser().resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(report_text, encoding="utf-8")
        if verbose:
            click.echo(f"Analysis report written to: {output_path}", err=True)
    else:
        click.echo(report_text)


def _fail(message: str, tip: Optional[str] = None) -> None:
    click.echo(f"Error: {message}", err=True)
    if tip:
        click.echo(f"  Tip: {tip}", err=True)
    sys.exit(1)


def _run_analysis(run, config: Config, output: Optional[str]) -> None:
    """Run an analysis callable with the CLI's error handling, then render and exit."""
    try:
        analysis = run()
        _emit(analysis, config.output_format, output, config.verbose)
    except FileNotFoundError as e:
        _fail(f"File or directory not found: {e}")
    except PermissionError as e:
        _fail(f"Permission denied: {e}", "Check file permissions or run with appropriate access")
    except ValueError as e:
        _fail(str(e))
    except Exception as e:
        click.echo(f"Error during analysis: {e}", err=True)
        if config.verbose:
            import traceback

            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()
        else:
            click.echo("  Tip: Run with --verbose to see full error details", err=True)
        sys.exit(1)

    sys.exit(conflict_exit_code(analysis.conflicts, config.fail_on))


@click.group()
@click.version_option(version=__version__, prog_name="mzguard")
def main():
    """
    mzguard - find RPG Maker MZ plugins that patch the same methods.

    Plugins extend the engine by reassigning prototype methods
    (Game_Map.prototype.update = ...) or by aliasing and wrapping them.
    When two plugins touch the same method, the later one may silently
    discard the earlier one's behavior. mzguard lists every such method
    with the plugins involved, in load order.

    Use 'mzguard scan --help' for detailed usage information.
    """
    pass


@main.command()
@click.argument("project_path", type=click.Path(exists=False, file_okay=False, dir_okay=True))
@click.option(
    "--mode",
    type=click.Choice(["full", "conflicts", "dependencies"], case_sensitive=False),
    default="full",
    help="Analysis mode (default: full)",
)
@_report_options
@click.option("--workers", type=int, default=None, help="Parallel workers for reading plugins")
@click.option(
    "--include-disabled",
    is_flag=True,
    default=False,
    help="Also analyze plugins switched off in js/plugins.js",
)
@click.option("--verbose/--no-verbose", "-v/--no-v", default=False, help="Show progress (default: disabled)")
@_log_options
def scan(
    project_path: str,
    mode: str,
    popularity_file: Optional[str],
    threshold: Optional[float],
    output_format: Optional[str],
    output: Optional[str],
    fail_on: Optional[str],
    workers: Optional[int],
    include_disabled: bool,
    verbose: bool,
    log_level: str,
    log_file: Optional[str],
    json_logging: bool,
):
    """
    Analyze the plugins of an RPG Maker MZ project.

    Reads js/plugins.js for the load order and js/plugins/*.js for the
    plugin sources, then reports override conflicts and dependency issues.

    Examples:

      # Full report
      mzguard scan ./MyGame

      # Grade conflicts with popularity data, fail CI on warnings
      mzguard scan ./MyGame --popularity classes.json --fail-on warning

      # Machine-readable output
      mzguard scan ./MyGame --format json --output report.json
    """
    configure_logging(level=log_level, json_output=json_logging, log_file=log_file)
    from mzguard.analysis.pipeline import AnalysisPipeline

    config = Config.load(
        cli_args={
            "popularity_file": popularity_file,
            "warning_threshold": threshold,
            "output_format": output_format,
            "fail_on": fail_on,
            "max_workers": workers,
            "include_disabled": include_disabled or None,
            "verbose": verbose or None,
        }
    )

    def run() -> ProjectAnalysis:
        pipeline = AnalysisPipeline(config=config, verbose=config.verbose)
        return pipeline.analyze(project_path, mode=mode)

    _run_analysis(run, config, output)


@main.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@_report_options
@click.option(
    "--dependencies/--no-dependencies",
    default=False,
    help="Also validate @base/@orderAfter declarations (default: disabled)",
)
@_log_options
def check(
    files: tuple[str, ...],
    popularity_file: Optional[str],
    threshold: Optional[float],
    output_format: Optional[str],
    output: Optional[str],
    fail_on: Optional[str],
    dependencies: bool,
    log_level: str,
    log_file: Optional[str],
    json_logging: bool,
):
    """
    Check plugin files for override conflicts.

    FILES are treated as the load order, first to last.

    Example:

      mzguard check CoreEngine.js BattleCore.js MyPatch.js
    """
    configure_logging(level=log_level, json_output=json_logging, log_file=log_file)
    from mzguard.analysis.pipeline import AnalysisPipeline

    config = Config.load(
        cli_args={
            "popularity_file": popularity_file,
            "warning_threshold": threshold,
            "output_format": output_format,
            "fail_on": fail_on,
        }
    )

    def run() -> ProjectAnalysis:
        pipeline = AnalysisPipeline(config=config, verbose=False)
        return pipeline.analyze_files(files, mode="full" if dependencies else "conflicts")

    _run_analysis(run, config, output)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
    help="Output format (default: text, one signature per line)",
)
def overrides(file: str, output_format: str):
    """List the prototype methods a single plugin overrides."""
    from mzguard.analysis.scanner import PluginScanner

    scanner = PluginScanner()
    headers = scanner.scan_files([file])
    if not headers:
        _fail(f"Cannot read plugin file {file}: {scanner.errors[0].error}")
    header = headers[0]

    if output_format == "json":
        click.echo(json.dumps(header.model_dump(), indent=2, ensure_ascii=False))
    else:
        for signature in header.overrides:
            click.echo(signature)


@main.command()
@click.argument("corpus_path", type=click.Path(exists=True, file_okay=False, dir_okay=True))
@click.option(
    "--output",
    "-o",
    type=click.Path(writable=True),
    default=None,
    help="Write the enrichment JSON here (default: stdout)",
)
@click.option("--top", type=int, default=15, help="Classes to list in the summary (default: 15)")
@_log_options
def popularity(
    corpus_path: str,
    output: Optional[str],
    top: int,
    log_level: str,
    log_file: Optional[str],
    json_logging: bool,
):
    """
    Build class popularity data from a corpus of plugins.

    Counts, for every class and method, how many plugins under CORPUS_PATH
    override it. The output can be passed back with --popularity.
    """
    configure_logging(level=log_level, json_output=json_logging, log_file=log_file)
    from mzguard.analysis.popularity import build_enrichment
    from mzguard.analysis.scanner import PluginScanner

    scanner = PluginScanner()
    try:
        sources = scanner.read_sources(corpus_path)
    except ValueError as e:
        _fail(str(e))

    enrichment = build_enrichment(sources)
    text = json.dumps(enrichment.model_dump(by_alias=True), indent=2, ensure_ascii=False)

    if output:
        output_path = Path(output).expanduser().resolve()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
        formatter = OutputFormatter(file=sys.stderr)
        formatter.print_popularity_summary(enrichment, top=top)
        formatter.print_success(f"Wrote popularity to {output_path}")
        for error in scanner.errors:
            formatter.print_warning(f"Skipped {error.file}: {error.error}")
    else:
        click.echo(text)


@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command("export")
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default=None,
    help="Output file path (default: stdout)",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["yaml", "json"], case_sensitive=False),
    default="yaml",
    help="Output format (default: yaml)",
)
def config_export(output: Optional[str], format: str):
    """Export current configuration to file."""
    config_obj = Config.load()

    if output:
        output_path = Path(output)
        config_obj.save(output_path, format=format)
        click.echo(f"Configuration exported to: {output_path}")
    else:
        if format == "yaml":
            content = yaml.safe_dump(config_obj.to_dict(), default_flow_style=False, sort_keys=False)
        else:
            content = json.dumps(config_obj.to_dict(), indent=2)
        click.echo(content)


@config.command("import")
@click.argument("config_file", type=click.Path(exists=True))
def config_import(config_file: str):
    """Import configuration from file into the user config."""
    config_obj = Config()
    config_obj.load_file(Path(config_file))
    config_obj.save(USER_CONFIG_PATH, format="yaml")
    click.echo(f"Configuration imported and saved to: {USER_CONFIG_PATH}")


if __name__ == "__main__":
    main()
