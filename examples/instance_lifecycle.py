#!/usr/bin/env python3
"""
Minimal example: drive one Atlas instance through its whole lifecycle.

This script demonstrates:
1. Creating an ephemeral cpu.2x instance and waiting for it to run
2. Stopping it and waiting for it to stop
3. Starting it again
4. Deleting it and waiting until it is gone

Required environment (or .env):
    ATLAS_PROJECT_ID, ATLAS_REGION_URL and either ATLAS_TOKEN or
    ATLAS_CLIENT_ID + ATLAS_CLIENT_SECRET

Usage:
    python examples/instance_lifecycle.py
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from atlas_lifecycle.api.client import client_from_config
from atlas_lifecycle.core.polling import poll_settings_from_config
from atlas_lifecycle.instances.lifecycle import (
    create_instance,
    delete_instance,
    start_instance,
    stop_instance,
)
from atlas_lifecycle.utils.config import load_config, require_config
from atlas_lifecycle.utils.exceptions import AtlasError, ConfigurationError
from atlas_lifecycle.utils.logging import get_logger, setup_logging

logger = get_logger("instance-lifecycle")

INSTANCE_NAME = "example-instance-01"
INSTANCE_TYPE = "cpu.2x"


def main() -> int:
    """Main function."""
    setup_logging()
    logger.info("Begin Atlas instance lifecycle example")

    try:
        config = require_config(load_config())
    except ConfigurationError as e:
        logger.error(f"Failed to initialize client: {e}")
        return 1

    client = client_from_config(config)
    settings = poll_settings_from_config(config)
    project_id = str(config["ATLAS_PROJECT_ID"])

    try:
        instance = create_instance(
            client, project_id, INSTANCE_NAME, INSTANCE_TYPE, settings=settings
        )
        print(f"🚀 Instance {instance.id} is {instance.state.label}")

        instance = stop_instance(client, project_id, instance.id, settings=settings)
        print(f"⏹️  Instance {instance.id} is {instance.state.label}")

        instance = start_instance(client, project_id, instance.id, settings=settings)
        print(f"▶️  Instance {instance.id} is {instance.state.label}")

        delete_instance(client, project_id, instance.id, settings=settings)
        print(f"🗑️  Instance {instance.id} deleted")
    except AtlasError as e:
        logger.error(f"Instance lifecycle failed: {e}")
        return 1
    finally:
        logger.info("End Atlas instance lifecycle example")

    return 0


if __name__ == "__main__":
    sys.exit(main())
