"""
Instance state model for the Atlas instance lifecycle tools.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..utils.exceptions import RequestError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class InstanceState(Enum):
    """Instance state as reported by the Atlas API."""

    PENDING = "pending"
    PROVISIONING = "provisioning"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    STARTING = "starting"
    DELETING = "deleting"
    OUT_OF_STOCK = "out_of_stock"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "InstanceState":
        """Parse a raw state string, tolerating case and '-' vs '_'."""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            logger.debug(f"Unrecognized instance state: {value!r}")
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return self.value.upper()


@dataclass
class Instance:
    """Instance information from the Atlas API."""

    id: str
    state: InstanceState
    name: str = ""
    type: str = ""
    ephemeral: bool | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def parse_instance(raw_data: Any) -> Instance:
    """Parse raw instance JSON into an Instance."""
    if not isinstance(raw_data, dict) or not raw_data.get("id"):
        raise RequestError(f"Malformed instance in response body: {raw_data!r}")

    return Instance(
        id=str(raw_data["id"]),
        state=InstanceState.parse(raw_data.get("state", raw_data.get("status"))),
        name=raw_data.get("name", ""),
        type=raw_data.get("type", ""),
        ephemeral=raw_data.get("ephemeral"),
        metadata=raw_data,
    )
