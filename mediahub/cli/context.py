"""
CLI Context - Global application state shared by commands.

The callback stores the configuration manager and debug flag here so
commands can build an aggregator without threading options through
every signature.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from mediahub.core import ConfigManager
from mediahub.core.aggregator import MediaAggregator, build_aggregator


T = TypeVar("T")

# Global application state
_config_manager: Optional[ConfigManager] = None
_debug: bool = False


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        raise RuntimeError("Configuration manager not initialized")
    return _config_manager


def set_config_manager(config_manager: ConfigManager) -> None:
    """Set the global configuration manager instance."""
    global _config_manager
    _config_manager = config_manager


def is_debug() -> bool:
    return _debug


def set_debug(debug: bool) -> None:
    global _debug
    _debug = debug


def run_with_aggregator(operation: Callable[[MediaAggregator], Awaitable[T]]) -> T:
    """
    Run one async operation against a fresh aggregator.

    The aggregator is built from the current settings and closed (pending
    mapping writes flushed, HTTP sessions released) before returning.

    Args:
        operation: Coroutine function taking the aggregator

    Returns:
        Whatever the operation returns
    """
    async def _run() -> T:
        aggregator = build_aggregator(get_config_manager().settings)
        try:
            return await operation(aggregator)
        finally:
            await aggregator.close()

    return asyncio.run(_run())


# Export context functions
__all__ = [
    "get_config_manager",
    "set_config_manager",
    "is_debug",
    "set_debug",
    "run_with_aggregator",
]
