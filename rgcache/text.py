"""Centralized user-facing text for rgcache CLI."""

from __future__ import annotations

class Styles:
    ERROR = "red"
    WARNING = "yellow"
    SUCCESS = "green"
    INFO = "dim"
    TITLE = "bold cyan"
    TABLE_HEADER = "bold magenta"


class Messages:
    APP_HELP = "rgcache – cache-aware ripgrep runner for interactive fuzzy finders."
    HELP_VERSION = "Show the rgcache version and exit."
    HELP_VERBOSE = "Emit debug logs on stderr."
    HELP_QUERY = "Literal query passed to the search backend as a single token."
    HELP_DYN_QUERY = "Query used to filter the full-scan output."
    HELP_GLOB = "Restrict the search to files matching this glob."
    HELP_CMD_DIR = "Directory to run the search backend in (defaults to the current one)."
    HELP_GREP_CMD = "Search backend command and baseline flags."
    HELP_INPUT = "Replay lines from a previously captured output file."
    HELP_NUMBER = "Maximum number of preview lines to emit."
    HELP_ENABLE_ICON = "Prefix each preview line with a file type glyph."
    HELP_FORMAT = "Output format: json envelope or plain lines."
    HELP_EXEC_CMD = "Literal shell command whose output should be cached."
    HELP_FORERUNNER = "Warm the cache with a full scan of a git repository."
    HELP_CACHE_CLEAR = "Remove every cached search result."
    HELP_SHOW_CONFIG = "Show current configuration."
    HELP_SET_GREP_CMD = "Set the default search backend command."
    HELP_SET_PREVIEW_LIMIT = "Set the default number of preview lines."
    HELP_SET_ENABLE_ICON = "Enable or disable glyph decoration (true/false)."
    HELP_SET_CACHE_THRESHOLD = "Cache results once they reach this many lines."
    HELP_SET_CACHE_DIR = "Store cached results under this directory."
    HELP_CLEAR_CACHE_DIR = "Reset the cache directory to the default location."
    HELP_SET_PATH_TOKEN = "Trailing path token policy: auto, always or never."

    ERROR_EMPTY_COMMAND = "Search command must not be empty."
    ERROR_SPAWN_FAILED = "Failed to start `{program}`: {reason}"
    ERROR_BOOLEAN_INVALID = "Invalid boolean value: {value}. Use true or false."
    ERROR_PATH_TOKEN_INVALID = "Invalid path token policy: {value}. Allowed: {allowed}."
    ERROR_NEGATIVE_TOTAL = "Cache entry total must be >= 0, got {value}."
    ERROR_PREFIX_DELIMITER = "Cache entry prefix must not contain '{delimiter}'."

    INFO_NO_RESULTS = "No matching lines found."
    INFO_FORERUNNER_SKIPPED = "{path} is not a git repository; skipping forerunner."
    INFO_FORERUNNER_DONE = "Forerunner finished for {path}."
    INFO_CACHE_EMPTY = "No cached results found."
    INFO_CACHE_CLEARED = "Removed {count} cached entr{plural}."
    INFO_CONFIG_SAVED = "Configuration updated."
    INFO_CONFIG_SUMMARY = (
        "Search command: {grep_cmd}\n"
        "Preview limit: {preview_limit}\n"
        "Icons enabled: {enable_icon}\n"
        "Cache threshold: {cache_threshold}\n"
        "Cache directory: {cache_dir}\n"
        "Path token policy: {path_token}"
    )

    TABLE_CACHE_TITLE = "Cached search results"
    TABLE_HEADER_KEY = "Key"
    TABLE_HEADER_ENTRY = "Entry"
    TABLE_HEADER_TOTAL = "Total"
    TABLE_HEADER_SIZE = "Size"
    TABLE_HEADER_MODIFIED = "Modified"
