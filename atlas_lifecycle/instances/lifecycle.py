"""
Instance lifecycle management for the Atlas API.

Each operation sends exactly one action request and then polls the instance
until it reaches the state the action leads to.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from ..api.client import ApiResponse, AtlasClient
from ..core.context import Context, background
from ..core.polling import PollSettings, poll_until
from ..core.state import Instance, InstanceState, parse_instance
from ..utils.exceptions import (
    AtlasError,
    NotFoundError,
    RequestError,
    ResourceUnavailableError,
)
from ..utils.logging import get_logger, log_execution_time, log_function_call

logger = get_logger(__name__)

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_ACCEPTED = 202
HTTP_NO_CONTENT = 204
HTTP_NOT_FOUND = 404


def _expect(response: ApiResponse, status_code: int) -> ApiResponse:
    if response.status_code != status_code:
        raise RequestError(response.status, response.status_code)
    return response


def _waiting(action: str, target: str) -> Callable[[Instance], None]:
    def on_wait(instance: Instance) -> None:
        logger.info(
            f"Waiting for instance {instance.id} to {action}. "
            f"Current state: {instance.state.label}",
            extra={
                "instance_id": instance.id,
                "state": instance.state.value,
                "target": target,
            },
        )

    return on_wait


def get_instance(client: AtlasClient, project_id: str, instance_id: str) -> Instance:
    """Query the current state of an instance."""
    response = client.get_instance(project_id, instance_id)
    if response.status_code == HTTP_NOT_FOUND:
        raise NotFoundError(response.status, response.status_code)
    return parse_instance(_expect(response, HTTP_OK).body)


@log_function_call
def list_instances(client: AtlasClient, project_id: str) -> list[Instance]:
    """List all instances in a project."""
    response = _expect(client.list_instances(project_id), HTTP_OK)
    body = response.body
    if isinstance(body, dict):
        body = body.get("instances", body.get("items", []))
    if not isinstance(body, list):
        raise RequestError(f"Malformed instance list in response body: {body!r}")
    instances = [parse_instance(item) for item in body]
    logger.info(f"Found {len(instances)} instances")
    return instances


@log_function_call
def create_instance(
    client: AtlasClient,
    project_id: str,
    name: str,
    instance_type: str,
    ephemeral: bool = True,
    ctx: Context | None = None,
    settings: PollSettings | None = None,
) -> Instance:
    """Create an instance and wait until it is running.

    If the instance type turns out to be out of stock, the partially created
    instance is deleted (best effort) and ResourceUnavailableError is raised.
    """
    ctx = ctx or background()
    ctx.check()

    logger.info(f"Creating instance {name} of type {instance_type}")

    response = _expect(
        client.create_instance(project_id, name, instance_type, ephemeral=ephemeral),
        HTTP_CREATED,
    )
    instance = parse_instance(response.body)
    instance_id = instance.id
    logger.info(f"Created instance {instance_id}")

    def converged(observed: Instance) -> bool:
        if observed.state is InstanceState.OUT_OF_STOCK:
            logger.warning(
                f"Instance type {instance_type} is out of stock, "
                f"cleaning up instance {instance_id}"
            )
            try:
                delete_instance(
                    client, project_id, instance_id, ctx=background(), settings=settings
                )
            except AtlasError as e:
                logger.error(f"Failed to delete instance {instance_id}: {e}")
            raise ResourceUnavailableError(
                f"Instance type {instance_type} out of stock", instance_id
            )
        return observed.state is InstanceState.RUNNING

    instance = poll_until(
        lambda: get_instance(client, project_id, instance_id),
        converged,
        settings=settings,
        ctx=ctx,
        initial=instance,
        on_wait=_waiting("start", InstanceState.RUNNING.value),
    )

    logger.info(f"Started instance {instance_id}")
    return instance


@log_function_call
def stop_instance(
    client: AtlasClient,
    project_id: str,
    instance_id: str,
    ctx: Context | None = None,
    settings: PollSettings | None = None,
) -> Instance:
    """Stop an instance and wait until it is stopped."""
    ctx = ctx or background()
    ctx.check()
    logger.info(f"Stopping instance {instance_id}")

    _expect(client.stop_instance(project_id, instance_id), HTTP_ACCEPTED)

    instance = poll_until(
        lambda: get_instance(client, project_id, instance_id),
        lambda observed: observed.state is InstanceState.STOPPED,
        settings=settings,
        ctx=ctx,
        on_wait=_waiting("stop", InstanceState.STOPPED.value),
    )

    logger.info(f"Stopped instance {instance_id}")
    return instance


@log_function_call
def start_instance(
    client: AtlasClient,
    project_id: str,
    instance_id: str,
    ctx: Context | None = None,
    settings: PollSettings | None = None,
) -> Instance:
    """Start a stopped instance and wait until it is running."""
    ctx = ctx or background()
    ctx.check()
    logger.info(f"Starting instance {instance_id}")

    _expect(client.start_instance(project_id, instance_id), HTTP_ACCEPTED)

    instance = poll_until(
        lambda: get_instance(client, project_id, instance_id),
        lambda observed: observed.state is InstanceState.RUNNING,
        settings=settings,
        ctx=ctx,
        on_wait=_waiting("start", InstanceState.RUNNING.value),
    )

    logger.info(f"Started instance {instance_id}")
    return instance


@log_function_call
def delete_instance(
    client: AtlasClient,
    project_id: str,
    instance_id: str,
    ctx: Context | None = None,
    settings: PollSettings | None = None,
) -> None:
    """Delete an instance and wait until the API no longer knows it."""
    ctx = ctx or background()
    ctx.check()
    logger.info(f"Deleting instance {instance_id}")

    _expect(client.delete_instance(project_id, instance_id), HTTP_NO_CONTENT)

    def probe() -> Instance | None:
        try:
            return get_instance(client, project_id, instance_id)
        except NotFoundError:
            return None

    poll_until(
        probe,
        lambda observed: observed is None,
        settings=settings,
        ctx=ctx,
        on_wait=_waiting("be deleted", "not_found"),
    )

    logger.info(f"Deleted instance {instance_id}")


@dataclass
class LifecycleStep:
    """Outcome of one step of a full lifecycle run."""

    step: str
    instance_id: str
    state: str
    seconds: float


@log_execution_time
def run_lifecycle(
    client: AtlasClient,
    project_id: str,
    name: str,
    instance_type: str,
    ephemeral: bool = True,
    ctx: Context | None = None,
    settings: PollSettings | None = None,
) -> list[LifecycleStep]:
    """Create, stop, start and delete one instance, in that order."""
    clock = settings.clock if settings is not None else time.monotonic
    steps: list[LifecycleStep] = []

    started = clock()
    instance = create_instance(
        client, project_id, name, instance_type, ephemeral=ephemeral, ctx=ctx, settings=settings
    )
    steps.append(LifecycleStep("create", instance.id, instance.state.value, clock() - started))

    started = clock()
    instance = stop_instance(client, project_id, instance.id, ctx=ctx, settings=settings)
    steps.append(LifecycleStep("stop", instance.id, instance.state.value, clock() - started))

    started = clock()
    instance = start_instance(client, project_id, instance.id, ctx=ctx, settings=settings)
    steps.append(LifecycleStep("start", instance.id, instance.state.value, clock() - started))

    started = clock()
    delete_instance(client, project_id, instance.id, ctx=ctx, settings=settings)
    steps.append(LifecycleStep("delete", instance.id, "deleted", clock() - started))

    return steps
