"""
Benign early-exit signals for the startup chain.

Whatever detects the condition raises the tagged exception; the completion
policy classifies by type. Untagged errors still carrying the legacy
"Leave Promise Chain: ..." message text are classified by that text.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


FORKED_PROCESS_MESSAGE = "Leave Promise Chain: Forking Process"
CLI_PROCESS_MESSAGE = "Leave Promise Chain: CLI Process"


class StartupSignal(str, Enum):
    """How a startup chain ended."""
    COMPLETED = "completed"
    FORKED_PROCESS = "forked_process"
    CLI_INVOCATION = "cli_invocation"
    FATAL = "fatal"

    @property
    def is_early_exit(self) -> bool:
        return self in (StartupSignal.FORKED_PROCESS, StartupSignal.CLI_INVOCATION)


class LeavePromiseChain(Exception):
    """Base for benign early exits. Never a startup failure."""

    signal = StartupSignal.FATAL
    default_message = "Leave Promise Chain"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)


class ForkedProcessExit(LeavePromiseChain):
    """The process forked; the parent stops its own startup here."""

    signal = StartupSignal.FORKED_PROCESS
    default_message = FORKED_PROCESS_MESSAGE


class CliProcessExit(LeavePromiseChain):
    """Short-lived CLI invocation; no server start follows."""

    signal = StartupSignal.CLI_INVOCATION
    default_message = CLI_PROCESS_MESSAGE


def classify_startup_error(error: Optional[BaseException]) -> StartupSignal:
    if error is None:
        return StartupSignal.COMPLETED
    if isinstance(error, (ForkedProcessExit, CliProcessExit)):
        return error.signal

    message = str(error)
    if FORKED_PROCESS_MESSAGE in message:
        return StartupSignal.FORKED_PROCESS
    if CLI_PROCESS_MESSAGE in message:
        return StartupSignal.CLI_INVOCATION
    return StartupSignal.FATAL
