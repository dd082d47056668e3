"""
Runtime package - environment resolution and the startup chain.

- Discovery: which environment was requested
- Reconciliation: align the running env with the persisted runtime record
- Completion: settle startup, treating forked/CLI exits as success
"""

from .resolver import (
    PersistMode,
    RuntimeResolver,
    complete_initialization,
    config_runtime_environment,
    get_env,
    set_app_running_env,
)

from .signals import (
    CliProcessExit,
    ForkedProcessExit,
    LeavePromiseChain,
    StartupSignal,
    classify_startup_error,
)

from .app import AppHost, RunOptions, run, run_startup

__all__ = [
    "PersistMode",
    "RuntimeResolver",
    "complete_initialization",
    "config_runtime_environment",
    "get_env",
    "set_app_running_env",
    "CliProcessExit",
    "ForkedProcessExit",
    "LeavePromiseChain",
    "StartupSignal",
    "classify_startup_error",
    "AppHost",
    "RunOptions",
    "run",
    "run_startup",
]
