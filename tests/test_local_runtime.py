from pathlib import Path

import pytest

from dualtrack.core.bridge import CommandBridge
from dualtrack.core.commands import CommandSpec
from dualtrack.core.state import CommandResult
from dualtrack.events import ChannelEventType, EventChannel, ExecCommandEvent
from dualtrack.runtime import LocalCommandRuntime


@pytest.mark.asyncio
async def test_ls_lists_the_workspace(tmp_path: Path, channel: EventChannel) -> None:
    (tmp_path / "hello.txt").write_text("hi", encoding="utf-8")
    runtime = LocalCommandRuntime(channel, tmp_path)
    runtime.attach()
    bridge = CommandBridge(channel, timeout_seconds=10)

    result = await bridge.execute(CommandSpec(command="ls"))
    await runtime.wait_idle()

    assert result.success is True
    assert isinstance(result.data, CommandResult)
    assert "hello.txt" in result.data.stdout
    assert result.data.exit_code == 0
    outputs = channel.events_of(ChannelEventType.RUNTIME_OUTPUT)
    assert outputs
    assert all(item.source == "runtime" for item in outputs)


@pytest.mark.asyncio
async def test_commands_outside_allow_list_are_blocked(tmp_path: Path, channel: EventChannel) -> None:
    runtime = LocalCommandRuntime(channel, tmp_path, allowed_commands=("ls",))
    runtime.attach()
    bridge = CommandBridge(channel, timeout_seconds=10)

    result = await bridge.execute(CommandSpec(command="npm", args=["test"]))

    assert result.success is False
    assert isinstance(result.data, CommandResult)
    assert result.data.exit_code == 126
    assert result.data.stderr == "Command blocked: npm\n"


@pytest.mark.asyncio
async def test_missing_executable_exits_127(tmp_path: Path, channel: EventChannel) -> None:
    runtime = LocalCommandRuntime(channel, tmp_path, allowed_commands=("dualtrack-no-such-binary",))

    exit_code = await runtime.run(ExecCommandEvent(session_id="s1", command="dualtrack-no-such-binary"))

    assert exit_code == 127
    exits = channel.events_of(ChannelEventType.RUNTIME_EXIT)
    assert [item.payload for item in exits] == [{"session_id": "s1", "exit_code": 127}]


@pytest.mark.asyncio
async def test_nonzero_exit_code_is_reported(tmp_path: Path, channel: EventChannel) -> None:
    runtime = LocalCommandRuntime(channel, tmp_path, allowed_commands=("ls",))

    exit_code = await runtime.run(ExecCommandEvent(session_id="s2", command="ls", args=["does-not-exist"]))

    assert exit_code != 0
    stderr = [
        item.payload["data"]
        for item in channel.events_of(ChannelEventType.RUNTIME_OUTPUT)
        if item.payload["stream"] == "stderr"
    ]
    assert "does-not-exist" in "".join(stderr)


def test_attach_is_idempotent_and_detach_releases(tmp_path: Path, channel: EventChannel) -> None:
    runtime = LocalCommandRuntime(channel, tmp_path)

    runtime.attach()
    runtime.attach()
    assert runtime.attached
    assert channel.subscriber_count(ChannelEventType.AGENT_EXEC_CMD) == 1

    runtime.detach()
    runtime.detach()
    assert not runtime.attached
    assert channel.subscriber_count(ChannelEventType.AGENT_EXEC_CMD) == 0
