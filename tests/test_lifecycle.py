import logging

import pytest

from atlas_lifecycle.core.context import Context
from atlas_lifecycle.core.polling import PollSettings
from atlas_lifecycle.core.state import InstanceState
from atlas_lifecycle.instances.lifecycle import (
    create_instance,
    delete_instance,
    get_instance,
    list_instances,
    run_lifecycle,
    start_instance,
    stop_instance,
)
from atlas_lifecycle.utils.exceptions import (
    CancelledError,
    NotFoundError,
    PollTimeoutError,
    RequestError,
    ResourceUnavailableError,
)
from fakes import PROJECT_ID, FakeClient, instance_body, response


class CancellingClient(FakeClient):
    """Cancels the context while answering the n-th status query."""

    def __init__(self, ctx: Context, on_query: int) -> None:
        super().__init__()
        self.ctx = ctx
        self.on_query = on_query

    def get_instance(self, project_id, instance_id):
        result = super().get_instance(project_id, instance_id)
        if self.count("get") == self.on_query:
            self.ctx.cancel("operator abort")
        return result


def test_create_waits_until_running(client, settings) -> None:
    client.queue_states("pending", "running")

    instance = create_instance(client, PROJECT_ID, "inst-1", "cpu.2x", settings=settings)

    assert instance.id == "inst-1"
    assert instance.state is InstanceState.RUNNING
    assert client.count("create") == 1
    assert client.count("get") == 2


def test_create_sleeps_before_every_status_query(client, clock, settings) -> None:
    client.queue_states("pending", "pending", "running")

    create_instance(client, PROJECT_ID, "inst-1", "cpu.2x", settings=settings)

    assert clock.sleeps == [5, 5, 5]
    assert client.get_calls_at == [5, 10, 15]


def test_create_out_of_stock_deletes_once_and_raises(client, settings) -> None:
    client.queue_states("out_of_stock", "not_found")

    with pytest.raises(ResourceUnavailableError) as excinfo:
        create_instance(client, PROJECT_ID, "inst-1", "gpu.h100", settings=settings)

    assert excinfo.value.instance_id == "inst-1"
    assert client.count("delete") == 1
    assert ("delete", "inst-1") in client.calls


def test_create_out_of_stock_accepts_hyphenated_state(client, settings) -> None:
    client.queue_states("OUT-OF-STOCK", "not_found")

    with pytest.raises(ResourceUnavailableError):
        create_instance(client, PROJECT_ID, "inst-1", "gpu.h100", settings=settings)

    assert client.count("delete") == 1


def test_create_out_of_stock_still_raises_when_cleanup_fails(client, settings) -> None:
    client.queue_states("out_of_stock")
    client.action_responses["delete"] = response(500)

    with pytest.raises(ResourceUnavailableError):
        create_instance(client, PROJECT_ID, "inst-1", "gpu.h100", settings=settings)

    assert client.count("delete") == 1


def test_create_rejects_unexpected_status(client, settings) -> None:
    client.create_response = response(409, {"error": "conflict"})

    with pytest.raises(RequestError) as excinfo:
        create_instance(client, PROJECT_ID, "inst-1", "cpu.2x", settings=settings)

    assert excinfo.value.status == "409 Conflict"
    assert excinfo.value.status_code == 409
    assert client.count("get") == 0


def test_create_fails_on_status_query_error(client, settings) -> None:
    client.get_responses.append(response(500))

    with pytest.raises(RequestError) as excinfo:
        create_instance(client, PROJECT_ID, "inst-1", "cpu.2x", settings=settings)

    assert excinfo.value.status_code == 500
    assert client.count("delete") == 0


def test_create_passes_ephemeral_flag() -> None:
    seen = {}

    class Recorder:
        def create_instance(self, project_id, name, instance_type, ephemeral=None):
            seen["ephemeral"] = ephemeral
            return response(201, instance_body("inst-9", "running"))

    instance = create_instance(Recorder(), PROJECT_ID, "inst-9", "cpu.2x", ephemeral=False)

    assert seen["ephemeral"] is False
    assert instance.state is InstanceState.RUNNING


def test_stop_queries_immediately_then_polls(client, clock, settings) -> None:
    client.queue_states("stopping", "stopped")

    instance = stop_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert instance.state is InstanceState.STOPPED
    assert client.count("stop") == 1
    assert client.count("get") == 2
    assert clock.sleeps == [5]


def test_stop_already_stopped_needs_no_sleep(client, clock, settings) -> None:
    client.queue_states("stopped")

    stop_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert client.count("get") == 1
    assert clock.sleeps == []


def test_stop_rejects_unexpected_status(client, settings) -> None:
    client.action_responses["stop"] = response(409)

    with pytest.raises(RequestError):
        stop_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert client.count("get") == 0


def test_start_waits_until_running(client, settings) -> None:
    client.queue_states("stopped", "starting", "running")

    instance = start_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert instance.state is InstanceState.RUNNING
    assert client.count("start") == 1
    assert client.count("get") == 3


def test_delete_succeeds_when_instance_disappears(client, settings) -> None:
    client.queue_states("stopping", "not_found")

    delete_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert client.count("delete") == 1
    assert client.count("get") == 2


def test_delete_treats_first_not_found_as_success(client, clock, settings) -> None:
    client.queue_states("not_found")

    delete_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert client.count("get") == 1
    assert clock.sleeps == []


def test_delete_rejects_unexpected_status(client, settings) -> None:
    client.action_responses["delete"] = response(202)

    with pytest.raises(RequestError) as excinfo:
        delete_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert excinfo.value.status == "202 Accepted"
    assert client.count("get") == 0


def test_delete_fails_on_status_query_error(client, settings) -> None:
    client.queue_states("deleting")
    client.get_responses.append(response(500))

    with pytest.raises(RequestError):
        delete_instance(client, PROJECT_ID, "inst-1", settings=settings)


def test_polling_gives_up_after_max_attempts(client, clock) -> None:
    client.queue_states("stopping", "stopping", "stopping", "stopping")
    settings = PollSettings(interval=5, max_attempts=3, sleep=clock.sleep, clock=clock)

    with pytest.raises(PollTimeoutError) as excinfo:
        stop_instance(client, PROJECT_ID, "inst-1", settings=settings)

    assert isinstance(excinfo.value, TimeoutError)
    assert client.count("get") == 3


def test_polling_observes_context_deadline(client, clock, settings) -> None:
    client.queue_states(*["stopping"] * 10)
    ctx = Context(deadline=12, clock=clock)

    with pytest.raises(CancelledError):
        stop_instance(client, PROJECT_ID, "inst-1", ctx=ctx, settings=settings)

    assert client.count("get") == 3


def test_polling_observes_cancellation(client, settings) -> None:
    client.queue_states(*["stopping"] * 10)
    ctx = Context()
    ctx.cancel("operator abort")

    with pytest.raises(CancelledError):
        stop_instance(client, PROJECT_ID, "inst-1", ctx=ctx, settings=settings)

    assert client.count("stop") == 0
    assert client.count("get") == 0


def test_waiting_events_carry_instance_and_states(client, settings, caplog) -> None:
    client.queue_states("stopping", "stopped")

    with caplog.at_level(logging.INFO, logger="atlas_lifecycle.instances.lifecycle"):
        stop_instance(client, PROJECT_ID, "inst-1", settings=settings)

    waiting = [r for r in caplog.records if r.getMessage().startswith("Waiting")]
    assert len(waiting) == 1
    assert waiting[0].instance_id == "inst-1"
    assert waiting[0].state == "stopping"
    assert waiting[0].target == "stopped"
    assert "Current state: STOPPING" in waiting[0].getMessage()


def test_get_instance_raises_not_found(client) -> None:
    client.queue_states("not_found")

    with pytest.raises(NotFoundError):
        get_instance(client, PROJECT_ID, "inst-1")


def test_list_instances_accepts_wrapped_body(client) -> None:
    client.list_response = response(
        200, {"instances": [instance_body("a", "running"), instance_body("b", "stopped")]}
    )

    instances = list_instances(client, PROJECT_ID)

    assert [i.id for i in instances] == ["a", "b"]
    assert [i.state for i in instances] == [InstanceState.RUNNING, InstanceState.STOPPED]


def test_run_lifecycle_drives_every_step(client, clock, settings) -> None:
    client.queue_states("running")
    client.queue_states("stopped")
    client.queue_states("starting", "running")
    client.queue_states("not_found")

    steps = run_lifecycle(client, PROJECT_ID, "inst-1", "cpu.2x", settings=settings)

    assert [s.step for s in steps] == ["create", "stop", "start", "delete"]
    assert [s.state for s in steps] == ["running", "stopped", "running", "deleted"]
    assert [call for call, _ in client.calls if call != "get"] == [
        "create",
        "stop",
        "start",
        "delete",
    ]
    assert steps[0].seconds == 5
    assert steps[2].seconds == 5


@pytest.mark.parametrize("call", ["create", "start", "delete"])
def test_cancelled_context_sends_no_action_request(client, call) -> None:
    ctx = Context()
    ctx.cancel()
    operations = {
        "create": lambda: create_instance(client, PROJECT_ID, "inst-1", "cpu.2x", ctx=ctx),
        "start": lambda: start_instance(client, PROJECT_ID, "inst-1", ctx=ctx),
        "delete": lambda: delete_instance(client, PROJECT_ID, "inst-1", ctx=ctx),
    }

    with pytest.raises(CancelledError):
        operations[call]()

    assert client.count(call) == 0
    assert client.calls == []


def test_cancellation_between_steps_sends_no_further_actions(clock, settings) -> None:
    ctx = Context()
    client = CancellingClient(ctx, on_query=1)
    client.clock = clock
    client.queue_states("running")

    with pytest.raises(CancelledError, match="operator abort"):
        run_lifecycle(client, PROJECT_ID, "inst-1", "cpu.2x", ctx=ctx, settings=settings)

    assert client.count("create") == 1
    assert client.count("stop") == 0
    assert client.count("delete") == 0


def test_out_of_stock_cleanup_runs_after_cancellation(clock, settings) -> None:
    ctx = Context()
    client = CancellingClient(ctx, on_query=1)
    client.clock = clock
    client.queue_states("out_of_stock", "not_found")

    with pytest.raises(ResourceUnavailableError):
        create_instance(client, PROJECT_ID, "inst-1", "gpu.h100", ctx=ctx, settings=settings)

    assert client.count("delete") == 1
    assert client.count("get") == 2


def test_call_logs_leave_out_client_context_and_settings(client, settings, caplog) -> None:
    client.queue_states("stopped")

    with caplog.at_level(logging.DEBUG, logger="atlas_lifecycle.instances.lifecycle"):
        stop_instance(client, PROJECT_ID, "inst-1", ctx=Context(), settings=settings)

    messages = [r.getMessage() for r in caplog.records]
    calling = [m for m in messages if m.startswith("Calling stop_instance")]
    assert calling == [f"Calling stop_instance(project_id={PROJECT_ID!r}, instance_id='inst-1')"]
    assert "FakeClient" not in calling[0]
