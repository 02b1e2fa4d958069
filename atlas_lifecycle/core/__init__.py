"""
Core modules for the Atlas instance lifecycle tools.
"""

from .context import Context, background
from .polling import PollSettings, poll_settings_from_config, poll_until
from .state import Instance, InstanceState, parse_instance

__all__ = [
    "Context",
    "background",
    "PollSettings",
    "poll_settings_from_config",
    "poll_until",
    "Instance",
    "InstanceState",
    "parse_instance",
]
