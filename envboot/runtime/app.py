"""
Startup chain - resolves the runtime environment and settles startup.

ARCHITECTURE:
- AppHost owns the mutable config, the configuration store and a logger
- run_startup(): reconcile -> early-exit checks -> completion policy
- run(): synchronous wrapper used by the CLI entrypoint
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from envboot.config.env import forked_worker
from envboot.config.schema import EnvbootConfig, RUNTIME_RECORD_KEY
from envboot.logging import LogStream, get_logger
from envboot.persistence.store import ConfigurationStore, JsonConfigurationStore
from .resolver import complete_initialization, config_runtime_environment
from .signals import CliProcessExit, ForkedProcessExit


@dataclass
class AppHost:
    """The process-wide runtime context."""

    configuration: ConfigurationStore
    config: Dict[str, Any] = field(default_factory=dict)
    logger: Any = field(default_factory=lambda: get_logger(LogStream.SYSTEM))

    @property
    def runtime(self) -> Optional[str]:
        process = self.config.get("process") or {}
        return process.get("runtime")

    @classmethod
    def from_config(cls, cfg: EnvbootConfig) -> "AppHost":
        return cls(configuration=JsonConfigurationStore(cfg.store.root_dir))


@dataclass
class RunOptions:
    args: Any = None
    default_env: Optional[str] = None
    record_key: Optional[str] = None
    cli: bool = False
    forked: bool = field(default_factory=forked_worker)


async def run_startup(host: AppHost, options: Optional[RunOptions] = None) -> bool:
    """
    Run the startup chain for *host*.

    Returns True on success or a benign early exit; re-raises the error
    that made startup fail otherwise. A pending asyncio store write is
    settled before the chain completes; its failure is logged, not raised.
    """
    options = options or RunOptions()
    settled = asyncio.get_running_loop().create_future()

    error: Optional[BaseException] = None
    try:
        pending = await config_runtime_environment(
            host,
            args=options.args,
            default_env=options.default_env,
            record_key=options.record_key or RUNTIME_RECORD_KEY,
        )
        if isinstance(pending, asyncio.Future):
            await asyncio.wait([pending])
        if options.forked:
            raise ForkedProcessExit()
        if options.cli:
            raise CliProcessExit()
    except Exception as e:
        error = e

    complete_initialization(host, settled.set_result, settled.set_exception, error)
    return await settled


def run(cfg: EnvbootConfig, options: Optional[RunOptions] = None) -> AppHost:
    """Build a host from settings and run its startup chain to completion."""
    options = replace(options) if options is not None else RunOptions()
    if options.default_env is None:
        options.default_env = cfg.default_environment
    if options.record_key is None:
        options.record_key = cfg.runtime_record_key

    host = AppHost.from_config(cfg)
    asyncio.run(run_startup(host, options))
    return host
