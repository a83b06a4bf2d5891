"""Plugins — observers around the policy pipeline.

Subclass :class:`Plugin` and override any of the five hooks, then
install it with ``PolicyBuilder.use()``.
"""

from gatehouse.plugins.caching import CachingConfig, CachingPlugin
from gatehouse.plugins.logging import LoggingConfig, LoggingPlugin
from gatehouse.plugins.pipeline import PluginPipeline
from gatehouse.plugins.protocol import Hook, Plugin
from gatehouse.plugins.storage import CacheStorage, MemoryCacheStorage

__all__ = [
    "CacheStorage",
    "CachingConfig",
    "CachingPlugin",
    "Hook",
    "LoggingConfig",
    "LoggingPlugin",
    "MemoryCacheStorage",
    "Plugin",
    "PluginPipeline",
]
