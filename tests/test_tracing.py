import json
from pathlib import Path

from dualtrack.events import ChannelEventType, EventChannel
from dualtrack.tracing import TraceRecorder


def _speak(channel: EventChannel, content: str) -> None:
    channel.emit(ChannelEventType.AGENT_SPEAK, {"content": content}, source="agent")


def test_records_every_event_up_to_limit(channel: EventChannel) -> None:
    recorder = TraceRecorder(channel, limit=2)

    _speak(channel, "one")
    channel.emit(ChannelEventType.RUNTIME_EXIT, {"session_id": "s", "exit_code": 0})
    _speak(channel, "three")

    entries = recorder.entries()
    assert [entry.envelope.type for entry in entries] == ["runtime.exit", "agent.speak"]
    assert entries[-1].envelope.payload["content"] == "three"


def test_export_writes_json_lines(tmp_path: Path, channel: EventChannel) -> None:
    recorder = TraceRecorder(channel)
    _speak(channel, "one")
    _speak(channel, "two")

    target = tmp_path / "trace.jsonl"
    written = recorder.export(target)

    lines = target.read_text(encoding="utf-8").splitlines()
    assert written == 2
    assert [json.loads(line)["envelope"]["payload"]["content"] for line in lines] == ["one", "two"]


def test_persists_to_file_as_events_arrive(tmp_path: Path, channel: EventChannel) -> None:
    target = tmp_path / "live.jsonl"
    TraceRecorder(channel, path=target)

    _speak(channel, "hello")

    record = json.loads(target.read_text(encoding="utf-8"))
    assert record["envelope"]["source"] == "agent"


def test_close_and_clear(channel: EventChannel) -> None:
    recorder = TraceRecorder(channel)
    _speak(channel, "before")

    recorder.clear()
    recorder.close()
    recorder.close()
    _speak(channel, "after")

    assert recorder.entries() == []
    assert channel.subscriber_count("*") == 0
