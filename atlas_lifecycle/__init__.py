"""
Atlas instance lifecycle tools.

Drives compute instances through create, stop, start and delete against the
Atlas REST API, polling until each transition has converged.
"""

__version__ = "1.0.0"

from .api.client import AtlasClient, client_from_config
from .core.context import Context
from .core.polling import PollSettings, poll_until
from .core.state import Instance, InstanceState
from .instances.lifecycle import (
    create_instance,
    delete_instance,
    run_lifecycle,
    start_instance,
    stop_instance,
)
from .utils.config import load_config
from .utils.logging import setup_logging

__all__ = [
    "AtlasClient",
    "client_from_config",
    "Context",
    "PollSettings",
    "poll_until",
    "Instance",
    "InstanceState",
    "create_instance",
    "stop_instance",
    "start_instance",
    "delete_instance",
    "run_lifecycle",
    "load_config",
    "setup_logging",
]
