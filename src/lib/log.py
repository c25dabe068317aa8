"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the current ProgramState's
verbosity level without requiring explicit state passing. Library code
(scanner, orchestrator, loader) logs through LOG() and stays silent unless a
state has been connected, so embedding applications are not spammed.

Usage:
    from assetpal.lib.log import LOG, state_connectToLogger

    # At start of pipeline function:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("This message appears if verbosity >= 1", level=1)
    LOG("Debug details appear if verbosity >= 2", level=2)
    LOG("Verbose trace appears if verbosity >= 3", level=3)
    LOG("Failures are tagged", level=1, severity="ERROR")
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Configure loguru with assetpal-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{function: <22}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Call this at the start of each pipeline function to make the state's
    verbosity setting available to LOG() calls throughout that context.
    asyncio tasks copy the current context when created, so resolution
    tasks spawned afterwards inherit the connection.

    Args:
        state: ProgramState instance with verbosity attribute
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, severity: str = "DEBUG", **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        severity: Loguru level name used for the record
        **kwargs: Additional loguru formatting arguments

    Verbosity levels:
        1 = Normal output (default)
        2 = Verbose (-v)
        3 = Debug (-vv or higher)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).log(severity, message, **kwargs)
