import contextlib
import os
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from hostenv.cli.shared_flags import output_options
from hostenv.core.domain.entities import XdgCategory
from hostenv.core.services.app_config import load_app_config
from hostenv.core.services.error_codes import ErrorCode, HostenvError
from hostenv.core.services.exit_codes import EX_CANTCREAT, exit_code_for_error
from hostenv.core.services.observability import get_current_run_id, log_operation
from hostenv.core.services.output_formatter import format_envelope, format_error_envelope
from hostenv.core.use_cases.open_url import OpenUrlUseCase
from hostenv.core.use_cases.resolve_paths import ResolvePathsUseCase

console = Console()


def get_console() -> Console:
    """Helper to get the rich console from context if available."""
    ctx = click.get_current_context(silent=True)
    if ctx and isinstance(ctx.obj, dict) and "console" in ctx.obj:
        return ctx.obj["console"]
    return console


def _write_output(
    output_str: str,
    output: Optional[str] = None,
    append: bool = False,
    add_newline: bool = True,
) -> None:
    """Write output to stdout or to a file if requested."""
    if output:
        try:
            mode = "a" if append else "w"
            with Path(output).open(mode, encoding="utf-8") as handle:
                handle.write(output_str + "\n" if add_newline else output_str)
            return
        except OSError as exc:
            click.echo(f"Error writing output file '{output}': {exc}", err=True)
            raise SystemExit(EX_CANTCREAT)
    click.echo(output_str, nl=add_newline)


@contextlib.contextmanager
def maybe_capture(output: Optional[str], format: str):
    """Capture console output if output file is specified and format is text."""
    if format == "text" and output:
        capture_obj = None
        try:
            with get_console().capture() as capture:
                capture_obj = capture
                yield
        finally:
            if capture_obj:
                captured_text = capture_obj.get()
                if captured_text.strip():
                    _write_output(captured_text, output=output, append=True, add_newline=False)
    else:
        yield


def _md_escape(value: object) -> str:
    text = "" if value is None else str(value)
    return text.replace("\\", "\\\\").replace("|", "\\|").replace("\n", "<br>")


@contextlib.contextmanager
def command_output_handler(
    command_name: str,
    format: str,
    output: Optional[str],
    include_timestamp: bool,
    run_id: str,
):
    """Centralized error handling and output formatting for CLI commands."""
    try:
        yield
    except HostenvError as e:
        if format == "json":
            _write_output(
                format_error_envelope(
                    command=command_name,
                    error_code=e.code,
                    message=e.message,
                    details=e.details,
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
        elif format == "md":
            _write_output(
                f"# Error\n\n- Code: {e.code.value}\n- Message: {_md_escape(e.message)}\n",
                output,
            )
        else:
            with maybe_capture(output, format):
                get_console().print(
                    Text(f"[ERROR {e.code.value}] {e.message}", style="bold red")
                )
        raise SystemExit(exit_code_for_error(e.code))
    except Exception as e:
        safe_msg = "An unexpected internal error occurred."
        if format == "json":
            _write_output(
                format_error_envelope(
                    command=command_name,
                    error_code=ErrorCode.UNKNOWN_ERROR,
                    message=safe_msg,
                    details={"internal_error": str(e)},
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
        elif format == "md":
            _write_output(f"# Error\n\n- Code: UNKNOWN_ERROR\n- Message: {safe_msg}\n", output)
        else:
            with maybe_capture(output, format):
                get_console().print(
                    Text(f"[ERROR UNKNOWN_ERROR] {safe_msg}", style="bold red")
                )

        # Always log the real error to stderr for operators
        click.echo(f"INTERNAL ERROR: {e}", err=True)
        raise SystemExit(exit_code_for_error(ErrorCode.UNKNOWN_ERROR))


def _format_value(value: Any) -> str:
    if isinstance(value, list):
        return "\n".join(value)
    return value


@click.group()
@click.version_option(package_name="hostenv", prog_name="hostenv")
@click.option("--no-color", is_flag=True, default=False, help="Disable ANSI colors in text output.")
@click.option("--verbose", is_flag=True, default=False, help="Enable verbose debug logging.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file to use instead of <config-home>/hostenv/config.yaml.",
)
@click.pass_context
def cli(ctx: click.Context, no_color: bool, verbose: bool, config_path: Optional[str]):
    """XDG base directories and default-browser launching."""
    if no_color:
        os.environ["NO_COLOR"] = "1"
    if verbose:
        previous_debug = os.environ.get("HOSTENV_DEBUG")
        os.environ["HOSTENV_DEBUG"] = "1"

        def _restore_debug() -> None:
            if previous_debug is None:
                os.environ.pop("HOSTENV_DEBUG", None)
            else:
                os.environ["HOSTENV_DEBUG"] = previous_debug

        ctx.call_on_close(_restore_debug)

    ctx.ensure_object(dict)
    ctx.obj["console"] = Console(no_color=no_color)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument(
    "category",
    required=False,
    type=click.Choice([c.value for c in XdgCategory]),
)
@output_options()
def paths(category, format, output, include_timestamp):
    """Print XDG base directories (one CATEGORY, or all of them)."""
    run_id = get_current_run_id()

    with command_output_handler("paths", format, output, include_timestamp, run_id):
        with log_operation("paths.resolve", details={"category": category}):
            report = ResolvePathsUseCase().execute(category)

        if format == "json":
            _write_output(
                format_envelope(
                    command="paths",
                    success=True,
                    data=report.as_dict(),
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
            return

        if format == "md":
            lines = ["# hostenv paths", "", f"- Platform: `{report.platform}`"]
            for name, value in report.paths.items():
                shown = ", ".join(f"`{v}`" for v in value) if isinstance(value, list) else f"`{value}`"
                lines.append(f"- {name}: {_md_escape(shown)}")
            _write_output("\n".join(lines) + "\n", output)
            return

        with maybe_capture(output, format):
            if category is not None:
                # Bare value(s), one per line, so the output is usable in scripts.
                get_console().print(Text(_format_value(report.paths[category])), soft_wrap=True)
                return
            table = Table(title=f"XDG base directories ({report.platform})")
            table.add_column("Category", style="cyan")
            table.add_column("Value")
            for name, value in report.paths.items():
                table.add_row(name, Text(_format_value(value)))
            get_console().print(table)


@cli.command(name="open")
@click.argument("url")
@click.option(
    "--timeout-ms",
    type=click.IntRange(min=0),
    default=None,
    help="Terminate the opener if it is still running after this many milliseconds.",
)
@click.option("--dry-run", is_flag=True, default=False, help="Show the command without running it.")
@click.option(
    "--wait",
    is_flag=True,
    default=False,
    help="Stay until the opener has exited or been terminated.",
)
@output_options()
@click.pass_context
def open_url(ctx, url, timeout_ms, dry_run, wait, format, output, include_timestamp):
    """Open URL in the default browser."""
    run_id = get_current_run_id()

    with command_output_handler("open", format, output, include_timestamp, run_id):
        config = load_app_config((ctx.obj or {}).get("config_path"))
        with log_operation("browser.open", details={"url": url, "dry_run": dry_run}) as op:
            report = OpenUrlUseCase(config=config).execute(
                url, timeout_ms=timeout_ms, dry_run=dry_run, wait=wait
            )
            op["details"]["pid"] = report.pid

        if format == "json":
            _write_output(
                format_envelope(
                    command="open",
                    success=True,
                    data=report.as_dict(),
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
            return

        command_line = " ".join(report.argv)
        if format == "md":
            verb = "Would run" if dry_run else "Ran"
            _write_output(f"# hostenv open\n\n- {verb}: `{_md_escape(command_line)}`\n", output)
            return

        with maybe_capture(output, format):
            if dry_run:
                get_console().print(Text(command_line), soft_wrap=True)
            else:
                get_console().print(Text(f"Opened {url} (pid {report.pid})", style="green"))


@cli.command(name="config")
@output_options()
@click.pass_context
def show_config(ctx, format, output, include_timestamp):
    """Show the effective configuration."""
    run_id = get_current_run_id()

    with command_output_handler("config", format, output, include_timestamp, run_id):
        config = load_app_config((ctx.obj or {}).get("config_path"))

        if format == "json":
            _write_output(
                format_envelope(
                    command="config",
                    success=True,
                    data=config.as_dict(),
                    include_timestamp=include_timestamp,
                    run_id=run_id,
                ),
                output,
            )
            return

        command = " ".join(config.browser.command) or "(platform default)"
        if format == "md":
            _write_output(
                "# hostenv config\n\n"
                f"- Source: `{config.source or '(defaults)'}`\n"
                f"- Browser timeout: {config.browser.timeout_ms} ms\n"
                f"- Browser command: `{_md_escape(command)}`\n",
                output,
            )
            return

        with maybe_capture(output, format):
            get_console().print(Text(f"Source: {config.source or '(defaults)'}"))
            get_console().print(Text(f"Browser timeout: {config.browser.timeout_ms} ms"))
            get_console().print(Text(f"Browser command: {command}"))


if __name__ == "__main__":
    cli()
