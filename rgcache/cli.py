"""Command line interface for rgcache."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .cache import CacheStore, open_store
from .config import SUPPORTED_PATH_TOKENS, Config, load_config
from .errors import RgcacheError
from .output import OutputFormat, configure_logging, emit_result
from .services.command_service import PlatformPolicy, detect_platform_policy
from .services.config_service import apply_config_updates, get_config_snapshot
from .services.forerunner_service import start_forerunner
from .services.search_service import SearchRequest, dyn_grep, grep, run_exec
from .text import Messages, Styles
from .utils import effective_directory, ensure_positive, format_size, resolve_directory

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"rgcache v{__version__}")
        raise typer.Exit()


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def _resolve_store(config: Config) -> CacheStore:
    return open_store(config.cache_dir)


def _resolve_policy(config: Config) -> PlatformPolicy:
    return detect_platform_policy(config.path_token)


def _resolve_cmd_dir(cmd_dir: Path | None) -> Path | None:
    if cmd_dir is None:
        return None
    try:
        return resolve_directory(cmd_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--cmd-dir") from exc


def _resolve_limit(number: int | None, config: Config) -> int:
    if number is None:
        return config.preview_limit
    try:
        return ensure_positive(number, "number")
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--number") from exc


def _fail(message: str, output_format: OutputFormat) -> NoReturn:
    if output_format == OutputFormat.json:
        typer.echo(message, err=True)
    else:
        err_console.print(_styled(message, Styles.ERROR))
    raise typer.Exit(code=1)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help=Messages.HELP_VERSION,
    ),
    verbose: bool = typer.Option(False, "--verbose", help=Messages.HELP_VERBOSE),
) -> None:
    """Global Typer callback for shared options."""
    configure_logging(verbose)


@app.command("grep")
def grep_command(
    query: str = typer.Argument(..., help=Messages.HELP_QUERY),
    glob: str | None = typer.Option(None, "--glob", "-g", help=Messages.HELP_GLOB),
    cmd_dir: Path | None = typer.Option(None, "--cmd-dir", help=Messages.HELP_CMD_DIR),
    grep_cmd: str | None = typer.Option(None, "--grep-cmd", help=Messages.HELP_GREP_CMD),
    number: int | None = typer.Option(None, "--number", "-n", help=Messages.HELP_NUMBER),
    enable_icon: bool | None = typer.Option(
        None,
        "--enable-icon/--no-icon",
        help=Messages.HELP_ENABLE_ICON,
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        help=Messages.HELP_FORMAT,
    ),
) -> None:
    """Run the search backend once for a literal query."""
    config = load_config()
    request = SearchRequest(
        query=query,
        directory=_resolve_cmd_dir(cmd_dir),
        limit=_resolve_limit(number, config),
        enable_icon=config.enable_icon if enable_icon is None else enable_icon,
        grep_cmd=grep_cmd or config.grep_cmd,
        glob=glob,
        policy=_resolve_policy(config),
    )
    try:
        result = grep(
            request,
            store=_resolve_store(config),
            cache_threshold=config.cache_threshold,
        )
    except RgcacheError as exc:
        _fail(str(exc), output_format)
    emit_result(result, output_format)


@app.command("dyn-grep")
def dyn_grep_command(
    query: str = typer.Argument("", help=Messages.HELP_DYN_QUERY),
    cmd_dir: Path | None = typer.Option(None, "--cmd-dir", help=Messages.HELP_CMD_DIR),
    input_file: Path | None = typer.Option(
        None,
        "--input",
        exists=True,
        dir_okay=False,
        help=Messages.HELP_INPUT,
    ),
    number: int | None = typer.Option(None, "--number", "-n", help=Messages.HELP_NUMBER),
    enable_icon: bool | None = typer.Option(
        None,
        "--enable-icon/--no-icon",
        help=Messages.HELP_ENABLE_ICON,
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        help=Messages.HELP_FORMAT,
    ),
) -> None:
    """Filter a full scan by QUERY, serving cached results when available."""
    config = load_config()
    request = SearchRequest(
        query=query,
        directory=_resolve_cmd_dir(cmd_dir),
        input_file=input_file,
        limit=_resolve_limit(number, config),
        enable_icon=config.enable_icon if enable_icon is None else enable_icon,
        policy=_resolve_policy(config),
    )
    try:
        result = dyn_grep(request, store=_resolve_store(config))
    except RgcacheError as exc:
        _fail(str(exc), output_format)
    except OSError as exc:
        _fail(str(exc), output_format)
    emit_result(result, output_format)


@app.command(help=Messages.HELP_FORERUNNER)
def forerunner(
    cmd_dir: Path | None = typer.Option(None, "--cmd-dir", help=Messages.HELP_CMD_DIR),
) -> None:
    config = load_config()
    directory = _resolve_cmd_dir(cmd_dir)
    job = start_forerunner(
        directory,
        store=_resolve_store(config),
        policy=_resolve_policy(config),
        cache_threshold=config.cache_threshold,
    )
    target = effective_directory(directory)
    if job is None:
        err_console.print(
            _styled(Messages.INFO_FORERUNNER_SKIPPED.format(path=target), Styles.INFO)
        )
        return
    # Keep the CLI process alive until the cache write lands.
    job.wait()
    err_console.print(
        _styled(Messages.INFO_FORERUNNER_DONE.format(path=target), Styles.INFO)
    )


@app.command("exec")
def exec_command(
    cmd: str = typer.Argument(..., help=Messages.HELP_EXEC_CMD),
    cmd_dir: Path | None = typer.Option(None, "--cmd-dir", help=Messages.HELP_CMD_DIR),
    number: int | None = typer.Option(None, "--number", "-n", help=Messages.HELP_NUMBER),
    enable_icon: bool | None = typer.Option(
        None,
        "--enable-icon/--no-icon",
        help=Messages.HELP_ENABLE_ICON,
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.json,
        "--format",
        help=Messages.HELP_FORMAT,
    ),
) -> None:
    """Run a literal shell command and cache its output."""
    config = load_config()
    try:
        result = run_exec(
            cmd,
            _resolve_cmd_dir(cmd_dir),
            store=_resolve_store(config),
            limit=_resolve_limit(number, config),
            enable_icon=config.enable_icon if enable_icon is None else enable_icon,
            cache_threshold=config.cache_threshold,
        )
    except RgcacheError as exc:
        _fail(str(exc), output_format)
    emit_result(result, output_format)


@app.command()
def cache(
    clear: bool = typer.Option(False, "--clear", help=Messages.HELP_CACHE_CLEAR),
) -> None:
    """Inspect or clear cached search results."""
    store = _resolve_store(load_config())
    if clear:
        removed = store.clear()
        plural = "y" if removed == 1 else "ies"
        console.print(
            _styled(
                Messages.INFO_CACHE_CLEARED.format(count=removed, plural=plural),
                Styles.SUCCESS,
            )
        )
        return
    entries = store.list_entries()
    if not entries:
        console.print(_styled(Messages.INFO_CACHE_EMPTY, Styles.WARNING))
        return
    _render_cache_entries(entries)


@app.command()
def config(
    set_grep_cmd_option: str | None = typer.Option(
        None,
        "--set-grep-cmd",
        help=Messages.HELP_SET_GREP_CMD,
    ),
    set_preview_limit_option: int | None = typer.Option(
        None,
        "--set-preview-limit",
        help=Messages.HELP_SET_PREVIEW_LIMIT,
    ),
    set_enable_icon_option: str | None = typer.Option(
        None,
        "--set-enable-icon",
        help=Messages.HELP_SET_ENABLE_ICON,
    ),
    set_cache_threshold_option: int | None = typer.Option(
        None,
        "--set-cache-threshold",
        help=Messages.HELP_SET_CACHE_THRESHOLD,
    ),
    set_cache_dir_option: str | None = typer.Option(
        None,
        "--set-cache-dir",
        help=Messages.HELP_SET_CACHE_DIR,
    ),
    clear_cache_dir: bool = typer.Option(
        False,
        "--clear-cache-dir",
        help=Messages.HELP_CLEAR_CACHE_DIR,
    ),
    set_path_token_option: str | None = typer.Option(
        None,
        "--set-path-token",
        help=Messages.HELP_SET_PATH_TOKEN,
    ),
    show: bool = typer.Option(False, "--show", help=Messages.HELP_SHOW_CONFIG),
) -> None:
    """Manage rgcache configuration stored in ~/.rgcache/config.json."""
    if set_preview_limit_option is not None and set_preview_limit_option < 1:
        raise typer.BadParameter("preview limit must be greater than 0")
    if set_cache_threshold_option is not None and set_cache_threshold_option < 1:
        raise typer.BadParameter("cache threshold must be greater than 0")
    enable_icon_value: bool | None = None
    if set_enable_icon_option is not None:
        try:
            enable_icon_value = _parse_boolean(set_enable_icon_option)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
    if set_path_token_option is not None:
        token = set_path_token_option.strip().lower()
        if token not in SUPPORTED_PATH_TOKENS:
            raise typer.BadParameter(
                Messages.ERROR_PATH_TOKEN_INVALID.format(
                    value=set_path_token_option,
                    allowed=", ".join(SUPPORTED_PATH_TOKENS),
                )
            )

    updates = apply_config_updates(
        grep_cmd=set_grep_cmd_option,
        preview_limit=set_preview_limit_option,
        enable_icon=enable_icon_value,
        cache_threshold=set_cache_threshold_option,
        cache_dir=set_cache_dir_option,
        clear_cache_dir=clear_cache_dir,
        path_token=set_path_token_option,
    )
    if updates.changed:
        console.print(_styled(Messages.INFO_CONFIG_SAVED, Styles.SUCCESS))
    if show or not updates.changed:
        snapshot = get_config_snapshot()
        console.print(
            Messages.INFO_CONFIG_SUMMARY.format(
                grep_cmd=snapshot.grep_cmd,
                preview_limit=snapshot.preview_limit,
                enable_icon="yes" if snapshot.enable_icon else "no",
                cache_threshold=snapshot.cache_threshold,
                cache_dir=snapshot.cache_dir or _resolve_store(snapshot).root,
                path_token=snapshot.path_token,
            ),
            markup=False,
        )


def _render_cache_entries(entries: list[dict[str, object]]) -> None:
    table = Table(title=_styled(Messages.TABLE_CACHE_TITLE, Styles.TITLE))
    table.add_column(Messages.TABLE_HEADER_KEY, style=Styles.TABLE_HEADER)
    table.add_column(Messages.TABLE_HEADER_ENTRY)
    table.add_column(Messages.TABLE_HEADER_TOTAL, justify="right")
    table.add_column(Messages.TABLE_HEADER_SIZE, justify="right")
    table.add_column(Messages.TABLE_HEADER_MODIFIED)
    for entry in entries:
        total = entry.get("total")
        modified = entry.get("modified")
        table.add_row(
            str(entry["key"])[:12],
            str(entry["identifier"]),
            "-" if total is None else str(total),
            format_size(int(entry.get("size_bytes") or 0)),
            modified.strftime("%Y-%m-%d %H:%M:%S") if modified is not None else "-",
        )
    console.print(table)


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    args = list(argv) if argv is not None else sys.argv[1:]
    if argv is None:
        app()
    else:
        app(args=args)
