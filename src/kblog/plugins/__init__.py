"""Extension layer: pluggy plugins and the lifecycle event bus.

Plugins load from the ``kblog.plugins`` entry point group plus the built-ins.
"""

from kblog.plugins.event_bus import EventBus, EventStatus
from kblog.plugins.manager import PluginManager

__all__ = ["EventBus", "EventStatus", "PluginManager"]
