"""
Runtime environment resolution for process startup.

FLOW:
    get_env()                      -> which environment was asked for
    config_runtime_environment()   -> reconcile with the persisted record
      └─ set_app_running_env()     -> apply in memory, optionally persist
    complete_initialization()      -> settle the startup chain

The host is any object exposing:
    host.config         mutable mapping; config["process"]["runtime"] is the active env
    host.configuration  ConfigurationStore (load / create / update)
    host.logger         info() / error()
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import functools
import inspect
import os
from collections.abc import Mapping, MutableMapping
from enum import Enum
from typing import Any, Callable, Optional, Union

from envboot.config.schema import DEFAULT_ENVIRONMENT, RUNTIME_RECORD_KEY
from envboot.logging import LogStream, get_logger
from envboot.persistence.records import RuntimeRecord, new_runtime_record, normalize_record
from .signals import StartupSignal, classify_startup_error


logger = get_logger(LogStream.STARTUP)
persist_logger = get_logger(LogStream.PERSISTENCE)

ENV_VARIABLES = ("NODE_ENV", "ENV")


class PersistMode(str, Enum):
    """Which store operation set_app_running_env() performs."""
    UPDATE = "update"
    CREATE = "create"


PersistResult = Union[concurrent.futures.Future, asyncio.Future]


# ============================================================================
# DISCOVERY
# ============================================================================

def _option(args: Any, name: str) -> Any:
    if args is None:
        return None
    if isinstance(args, Mapping):
        return args.get(name)
    return getattr(args, name, None)


def get_env(args: Any = None, environ: Optional[Mapping[str, str]] = None) -> Union[str, bool]:
    """
    Resolve the requested environment name.

    Order: ``args.e``, a single positional ``args._[0]``, then the
    NODE_ENV and ENV variables. Returns False when nothing is requested.
    """
    explicit = _option(args, "e")
    if isinstance(explicit, str) and explicit:
        return explicit

    positional = _option(args, "_")
    if isinstance(positional, (list, tuple)) and len(positional) == 1:
        return positional[0]

    environ = os.environ if environ is None else environ
    for name in ENV_VARIABLES:
        value = environ.get(name)
        if value:
            return value

    return False


# ============================================================================
# APPLICATION
# ============================================================================

def _process_section(config: MutableMapping) -> MutableMapping:
    process = config.get("process")
    if not isinstance(process, MutableMapping):
        process = {}
        config["process"] = process
    return process


def _log_persist_failure(mode: PersistMode, environment: str, future: PersistResult) -> None:
    if future.cancelled():
        persist_logger.warning(f"Runtime {mode.value} cancelled", extra={"environment": environment})
        return
    error = future.exception()
    if error is not None:
        persist_logger.error(
            f"Runtime {mode.value} failed: {error}",
            extra={"environment": environment, "error_type": type(error).__name__},
        )


async def _await(awaitable: Any) -> Any:
    return await awaitable


def _completed(fn: Callable[[], Any]) -> concurrent.futures.Future:
    future: concurrent.futures.Future = concurrent.futures.Future()
    try:
        future.set_result(fn())
    except Exception as e:
        future.set_exception(e)
    return future


def _detach(call: Callable[[RuntimeRecord], Any], record: RuntimeRecord) -> PersistResult:
    """Run a store write without awaiting it; the outcome lands in the returned future."""
    outcome = _completed(lambda: call(record))
    if outcome.exception() is not None:
        return outcome

    result = outcome.result()
    if not inspect.isawaitable(result):
        return outcome

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No loop to schedule on; drive the write to completion here.
        return _completed(lambda: asyncio.run(_await(result)))
    return asyncio.ensure_future(result)


def set_app_running_env(
    host: Any,
    env_name: str,
    persist_mode: Optional[Union[PersistMode, str]] = None,
    record: Optional[RuntimeRecord] = None,
    record_key: str = RUNTIME_RECORD_KEY,
) -> Union[bool, PersistResult]:
    """
    Make *env_name* the running environment of *host*.

    Without *persist_mode* this only mutates ``host.config`` and returns
    False. With "update" or "create" it also hands a runtime record to the
    matching store operation and returns a future for that write, which is
    not awaited here. Write failures are logged, never raised.
    """
    _process_section(host.config)["runtime"] = env_name

    if persist_mode is None:
        return False

    mode = PersistMode(persist_mode)
    if mode is PersistMode.UPDATE:
        rec = record.with_environment(env_name) if record is not None else new_runtime_record(env_name, record_key)
        call = host.configuration.update
    else:
        rec = new_runtime_record(env_name, record.filepath if record is not None else record_key)
        call = host.configuration.create

    future = _detach(call, rec)
    future.add_done_callback(functools.partial(_log_persist_failure, mode, env_name))
    return future


# ============================================================================
# RECONCILIATION
# ============================================================================

def _configured_env(config: Mapping) -> Optional[str]:
    process = config.get("process")
    if isinstance(process, Mapping):
        for key in ("runtime", "environment"):
            value = process.get(key)
            if isinstance(value, str) and value:
                return value
    value = config.get("environment")
    if isinstance(value, str) and value:
        return value
    return None


async def config_runtime_environment(
    host: Any,
    args: Any = None,
    default_env: Optional[str] = None,
    record_key: str = RUNTIME_RECORD_KEY,
) -> Optional[PersistResult]:
    """
    Reconcile the running environment with the persisted runtime record.

    Target environment: get_env(args), else the stored record's
    environment, else *default_env*, else whatever host.config already names, else
    "development". A missing record is created; a record holding another
    environment is updated. Load failures propagate to the awaiting caller.

    Returns the future of the store write, or None when nothing was written.
    The write is not awaited here; callers that need it settled await it.
    """
    requested = get_env(args)

    loaded = host.configuration.load(record_key)
    if inspect.isawaitable(loaded):
        loaded = await loaded
    record = normalize_record(loaded)

    target = (
        requested
        or (record.environment if record is not None else None)
        or default_env
        or _configured_env(host.config)
        or DEFAULT_ENVIRONMENT
    )

    if record is None:
        pending = set_app_running_env(host, target, PersistMode.CREATE, record_key=record_key)
        outcome = "created"
    elif record.environment != target:
        pending = set_app_running_env(host, target, PersistMode.UPDATE, record=record)
        outcome = "updated"
    else:
        set_app_running_env(host, target)
        pending = None
        outcome = "unchanged"

    logger.info(
        f"Runtime environment: {target}",
        extra={
            "environment": target,
            "requested": requested or None,
            "previous": record.environment if record is not None else None,
            "record": outcome,
        },
    )
    return pending


# ============================================================================
# COMPLETION POLICY
# ============================================================================

def complete_initialization(
    host: Any,
    resolve: Callable[[bool], Any],
    reject: Callable[[BaseException], Any],
    error: Optional[BaseException] = None,
) -> StartupSignal:
    """
    Settle the startup chain.

    Forked-process and CLI early exits log at info and resolve(True); any
    other error logs at error and is passed to reject(). No error resolves
    without logging. Exactly one of the callbacks runs.
    """
    signal = classify_startup_error(error)

    if signal is StartupSignal.COMPLETED:
        resolve(True)
    elif signal.is_early_exit:
        host.logger.info(f"Leaving startup chain early ({signal.value}): {error}")
        resolve(True)
    else:
        host.logger.error(f"Startup failed: {error}")
        reject(error)

    return signal


class RuntimeResolver:
    """The resolver operations bound to one host."""

    def __init__(self, host: Any):
        self.host = host

    @staticmethod
    def get_env(args: Any = None, environ: Optional[Mapping[str, str]] = None) -> Union[str, bool]:
        return get_env(args, environ)

    def set_app_running_env(self, env_name: str, persist_mode=None, **kwargs):
        return set_app_running_env(self.host, env_name, persist_mode, **kwargs)

    async def config_runtime_environment(self, args: Any = None, **kwargs) -> Optional[PersistResult]:
        return await config_runtime_environment(self.host, args, **kwargs)

    def complete_initialization(self, resolve, reject, error=None) -> StartupSignal:
        return complete_initialization(self.host, resolve, reject, error)
