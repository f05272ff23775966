import base64
import json

import pytest

from realtime_voice.event_loop import EventLoop
from realtime_voice.pipeline import VoiceChatApp
from realtime_voice.recording import RecorderState, RecordingController
from realtime_voice.session import SessionClient

from conftest import SilentCapture


@pytest.fixture
def loop():
    return EventLoop()


@pytest.fixture
def app(loop, transport, sink, scheduler, capture, tmp_path):
    holder = {}
    session = SessionClient(
        transport=transport,
        sink=sink,
        scheduler=scheduler,
        instructions="Listen carefully.",
        on_turn_complete=lambda: holder["app"].prompt(),
    )
    recorder = RecordingController(
        capture,
        directory=tmp_path / "recording",
        on_complete=lambda recording: holder["app"].send_recording(recording),
    )
    holder["app"] = VoiceChatApp(loop=loop, transport=transport, sink=sink, session=session, recorder=recorder)
    holder["app"].recorder = recorder
    return holder["app"]


def test_start_stop_sends_one_item_and_one_response_request(app, transport, tmp_path):
    app.handle_line("s\n")
    app.handle_line("q\n")

    assert [m["type"] for m in transport.sent] == ["conversation.item.create", "response.create"]
    content = transport.sent[0]["item"]["content"]
    assert content[0]["type"] == "input_audio"
    # one second of 24 kHz mono silence
    assert base64.b64decode(content[0]["audio"]) == b"\x00" * 48000
    for message in transport.sent:
        json.dumps(message)
    assert (tmp_path / "recording" / "output-1.wav").exists()


def test_commands_are_trimmed_and_case_insensitive(app, transport):
    app.handle_line("  S \n")
    app.handle_line("Q")
    assert len(transport.sent) == 2


def test_other_lines_are_ignored(app, transport, capture):
    for line in ["", "hello", "x\n", "ss"]:
        app.handle_line(line)
    assert capture.calls == [] and transport.sent == []


def test_stop_while_idle_sends_nothing(app, transport):
    app.handle_line("q")
    assert transport.sent == []


def test_send_failure_keeps_running(app, transport, capsys, caplog):
    transport.is_open = False
    app.handle_line("s")
    app.handle_line("q")

    assert transport.sent == []
    assert "Could not send output-1.wav" in caplog.text
    assert "Enter (s)" in capsys.readouterr().out
    assert not app.exited


def test_turn_completion_prompts_again(app, scheduler, sink, capsys):
    app._session.handle_message(json.dumps({"type": "response.done"}))
    scheduler.timers[0].fire()

    assert sink.calls == ["close", "open"]
    assert "Enter (s) to start recording" in capsys.readouterr().out


def test_exit_mid_recording_cleans_up(app, loop, transport, sink, capture, scheduler):
    app.handle_line("s")
    app._session.handle_message(json.dumps({"type": "response.done"}))

    app.handle_line("e")

    assert app.exited
    assert app.recorder.state is RecorderState.IDLE
    assert capture.calls[-1][0] == "stop"
    assert transport.closed
    assert sink.calls[-1] == "close"
    assert scheduler.timers[0].cancelled
    assert transport.sent == []
    assert not loop.running


def test_exit_with_closed_connection_is_safe(app, transport, sink):
    transport.is_open = False
    app.handle_line("e")
    app.handle_line("e")

    assert not transport.closed
    assert sink.calls == ["close"]


def test_run_opens_sink_connects_and_exits_on_command(loop, app, sink):
    connected = []
    loop.post(app.handle_line, "e\n")

    app.run(connect=lambda: connected.append(True))

    assert connected == [True]
    assert sink.calls == ["open", "close"]
    assert app.exited


def test_events_posted_from_helper_threads_are_processed_in_order(loop, app, transport):
    loop.post(app._session.handle_message, json.dumps({"type": "session.created", "session": {"id": "sess_abc"}}))
    loop.post(app.handle_line, "s")
    loop.post(app.handle_line, "q")

    assert loop.run_pending() == 3
    assert [m["type"] for m in transport.sent] == [
        "session.update",
        "conversation.item.create",
        "response.create",
    ]


def test_recording_at_other_rate_is_sent_at_24k(loop, transport, sink, scheduler, tmp_path):
    capture = SilentCapture(sample_rate=16000)
    holder = {}
    session = SessionClient(transport=transport, sink=sink, scheduler=scheduler, instructions="Hi.")
    recorder = RecordingController(
        capture,
        directory=tmp_path,
        on_complete=lambda recording: holder["app"].send_recording(recording),
    )
    holder["app"] = VoiceChatApp(loop=loop, transport=transport, sink=sink, session=session, recorder=recorder)

    holder["app"].handle_line("s")
    holder["app"].handle_line("q")

    audio = transport.sent[0]["item"]["content"][0]["audio"]
    assert len(base64.b64decode(audio)) == 48000
