"""
Instance lifecycle operations for the Atlas API.
"""

from .lifecycle import (
    LifecycleStep,
    create_instance,
    delete_instance,
    get_instance,
    list_instances,
    run_lifecycle,
    start_instance,
    stop_instance,
)

__all__ = [
    "LifecycleStep",
    "create_instance",
    "stop_instance",
    "start_instance",
    "delete_instance",
    "get_instance",
    "list_instances",
    "run_lifecycle",
]
