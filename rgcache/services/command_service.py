"""Argument composition for the external search backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from ..config import DEFAULT_PATH_TOKEN, SUPPORTED_PATH_TOKENS
from ..errors import RgcacheError
from ..text import Messages

GLOB_FLAG = "-g"
PATH_TOKEN = "."
# Query-less scan shared by the forerunner and dyn-grep so both hit one cache key.
FULL_SCAN_ARGS: tuple[str, ...] = (
    "rg",
    "--column",
    "--line-number",
    "--no-heading",
    "--color=never",
    "--smart-case",
    "",
)


@dataclass(frozen=True, slots=True)
class PlatformPolicy:
    """Platform specific argument shaping.

    ripgrep on Windows needs an explicit path when none is given, otherwise it
    waits on stdin.
    """

    require_path_token: bool = False


@dataclass(frozen=True, slots=True)
class GrepCommand:
    args: tuple[str, ...]
    cwd: Path | None = None
    shell: bool = False

    @property
    def program(self) -> str:
        return self.args[0]


def detect_platform_policy(path_token: str = DEFAULT_PATH_TOKEN) -> PlatformPolicy:
    """Return the policy for the running platform unless *path_token* forces one."""

    token = (path_token or DEFAULT_PATH_TOKEN).strip().lower()
    if token not in SUPPORTED_PATH_TOKENS:
        raise ValueError(
            Messages.ERROR_PATH_TOKEN_INVALID.format(
                value=path_token, allowed=", ".join(SUPPORTED_PATH_TOKENS)
            )
        )
    if token == "always":
        return PlatformPolicy(require_path_token=True)
    if token == "never":
        return PlatformPolicy(require_path_token=False)
    return PlatformPolicy(require_path_token=os.name == "nt")


def _finalize(
    args: list[str],
    directory: Path | str | None,
    policy: PlatformPolicy | None,
) -> GrepCommand:
    active = policy if policy is not None else detect_platform_policy()
    if active.require_path_token:
        args.append(PATH_TOKEN)
    cwd = Path(directory) if directory is not None else None
    return GrepCommand(args=tuple(args), cwd=cwd)


def compose_grep_command(
    grep_cmd: str,
    query: str,
    *,
    glob: str | None = None,
    directory: Path | str | None = None,
    policy: PlatformPolicy | None = None,
) -> GrepCommand:
    """Build the argv for a one-shot grep.

    *grep_cmd* is split on whitespace into the executable and its baseline flags.
    *query* is appended as one token and never re-tokenized, so characters that a
    shell or the flag parser would interpret reach the backend untouched.
    """

    args = (grep_cmd or "").split()
    if not args:
        raise RgcacheError(Messages.ERROR_EMPTY_COMMAND)
    args.append(query)
    if glob:
        args.extend((GLOB_FLAG, glob))
    return _finalize(args, directory, policy)


def compose_full_scan_command(
    directory: Path | str | None = None,
    *,
    policy: PlatformPolicy | None = None,
) -> GrepCommand:
    return _finalize(list(FULL_SCAN_ARGS), directory, policy)


def compose_shell_command(
    cmd_str: str,
    directory: Path | str | None = None,
) -> GrepCommand:
    """Wrap a literal command line for the shell spawn path."""

    clean = (cmd_str or "").strip()
    if not clean:
        raise RgcacheError(Messages.ERROR_EMPTY_COMMAND)
    cwd = Path(directory) if directory is not None else None
    return GrepCommand(args=(clean,), cwd=cwd, shell=True)
