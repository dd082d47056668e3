#!/usr/bin/env python3
"""
envboot - Main Entrypoint

USAGE:
    python main.py                       # NODE_ENV / ENV / persisted record / default
    python main.py production            # single positional environment
    python main.py -e test --store-dir state/config
    python main.py --env-check           # print the environment to resolve and exit
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from envboot.config import ConfigLoader
from envboot.errors import ConfigError
from envboot.logging import LogStream, get_logger, setup_logging
from envboot.runtime import RunOptions, get_env, run


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="envboot",
        description="Resolve and persist the runtime environment of this process.",
    )
    p.add_argument(
        "_",
        nargs="*",
        metavar="ENVIRONMENT",
        help="Environment name (used only when exactly one is given)",
    )
    p.add_argument(
        "-e",
        "--env",
        dest="e",
        default=None,
        help="Environment name (takes precedence over the positional argument)",
    )
    p.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to settings YAML (default: $ENVBOOT_CONFIG or ./config/envboot.yaml)",
    )
    p.add_argument(
        "--store-dir",
        type=Path,
        default=None,
        help="Configuration store directory (overrides settings)",
    )
    p.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Log directory (overrides settings)",
    )
    p.add_argument(
        "--cli",
        action="store_true",
        help="Short-lived CLI run: resolve the environment, then leave the startup chain.",
    )
    p.add_argument(
        "--env-check",
        action="store_true",
        help="Print the environment from the request or settings and exit without touching the store.",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    try:
        cfg = ConfigLoader(args.config).load_and_validate()
    except (FileNotFoundError, ConfigError) as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    if args.store_dir is not None:
        cfg.store.root_dir = args.store_dir
    if args.log_dir is not None:
        cfg.logging.log_dir = args.log_dir

    if args.env_check:
        requested = get_env(args)
        source = "requested" if requested else "default"
        print(f"environment={requested or cfg.default_environment} source={source}")
        return 0

    setup_logging(
        log_dir=cfg.logging.log_dir,
        log_level=cfg.logging.log_level.value,
        console_level=cfg.logging.console_level.value,
        json_logs=cfg.logging.json_logs,
    )

    try:
        host = run(cfg, RunOptions(args=args, cli=args.cli))
    except Exception:
        # Already reported by the completion policy.
        return 1

    get_logger(LogStream.SYSTEM).info(f"Running in {host.runtime} environment")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
