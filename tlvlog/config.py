"""Configuration — frozen dataclass built from YAML, env vars and CLI args."""

import argparse
import logging
import os
from dataclasses import dataclass

import yaml

from tlvlog.levels import DEFAULT_LEVEL, Level, parse_level

logger = logging.getLogger(__name__)


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    log_file: str = "logs/app.binlog"
    err_file: str | None = None
    min_level: Level = DEFAULT_LEVEL
    truncate: bool = False
    verbose: bool = False
    args: tuple[str, ...] = ()
    # argv index of args[0]; argv[0] is the program name
    first_arg_index: int = 1


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def build_cli_parser(description: str = "Binary TLV logger") -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("files", nargs="*", metavar="ARG",
                        help="logfile [errfile] [args...]")
    parser.add_argument("--level", default=None,
                        help="Minimum level to record (debug, info, warn, ...)")
    parser.add_argument("--truncate", action="store_true", default=None,
                        help="Truncate log files instead of appending")
    parser.add_argument("--verbose", action="store_true", default=None,
                        help="Enable debug diagnostics on stderr")
    parser.add_argument("--config", default=None,
                        help="Path to YAML config file")
    return parser


def split_positionals(values) -> tuple[list[str], list[str]]:
    """Split positionals into (files, args).

    One positional is the logfile. With two or more, the first two are
    logfile and errfile and the rest are extra args.
    """
    values = list(values)
    nfiles = min(len(values), 2)
    return values[:nfiles], values[nfiles:]


def load_config(argv=None) -> Config:
    """Build Config from defaults <- YAML file <- env vars <- CLI args."""
    parser = build_cli_parser()
    args = parser.parse_intermixed_args(argv)
    file_data = load_yaml_config(args.config)

    log_file = file_data.get("log_file", Config.log_file)
    err_file = file_data.get("err_file", Config.err_file)
    min_level = file_data.get("min_level", file_data.get("level", Config.min_level))
    truncate = file_data.get("truncate", Config.truncate)
    verbose = file_data.get("verbose", Config.verbose)

    log_file = os.environ.get("TLVLOG_LOG_FILE", log_file)
    err_file = os.environ.get("TLVLOG_ERR_FILE", err_file)
    min_level = os.environ.get("TLVLOG_LEVEL", min_level)
    truncate = os.environ.get("TLVLOG_TRUNCATE", truncate)
    verbose = os.environ.get("TLVLOG_VERBOSE", verbose)

    files, extra = split_positionals(args.files)
    if files:
        log_file = files[0]
    if len(files) > 1:
        err_file = files[1]

    return Config(
        log_file=log_file,
        err_file=err_file or None,
        min_level=parse_level(args.level if args.level is not None else min_level),
        truncate=args.truncate if args.truncate is not None else _parse_bool(truncate),
        verbose=args.verbose if args.verbose is not None else _parse_bool(verbose),
        args=tuple(extra),
        first_arg_index=len(files) + 1,
    )
