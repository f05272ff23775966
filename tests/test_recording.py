from realtime_voice.models import Recording
from realtime_voice.recording import RecorderState, RecordingController


class CallRecorder:
    def __init__(self):
        self.calls = []

    def start(self, path):
        self.calls.append(("start", path.name))

    def stop(self):
        self.calls.append(("stop",))


def test_start_allocates_numbered_file_in_new_directory(tmp_path):
    capture = CallRecorder()
    controller = RecordingController(capture, directory=tmp_path / "recording")

    recording = controller.start()

    assert recording == Recording(path=tmp_path / "recording" / "output-1.wav", ordinal=1)
    assert (tmp_path / "recording").is_dir()
    assert controller.state is RecorderState.RECORDING
    assert capture.calls == [("start", "output-1.wav")]


def test_stop_finalizes_and_hands_off(tmp_path):
    capture = CallRecorder()
    completed = []
    controller = RecordingController(capture, directory=tmp_path, on_complete=completed.append)

    started = controller.start()
    stopped = controller.stop()

    assert stopped == started
    assert completed == [started]
    assert controller.state is RecorderState.IDLE
    assert capture.calls == [("start", "output-1.wav"), ("stop",)]


def test_stop_while_idle_is_a_no_op(tmp_path):
    capture = CallRecorder()
    completed = []
    controller = RecordingController(capture, directory=tmp_path, on_complete=completed.append)

    assert controller.stop() is None
    assert capture.calls == [] and completed == []
    assert controller.ordinal == 0


def test_second_start_restarts_and_still_increments(tmp_path):
    capture = CallRecorder()
    completed = []
    controller = RecordingController(capture, directory=tmp_path, on_complete=completed.append)

    controller.start()
    second = controller.start()

    assert second.ordinal == 2 and second.path.name == "output-2.wav"
    assert controller.current == second
    assert capture.calls == [("start", "output-1.wav"), ("stop",), ("start", "output-2.wav")]
    assert completed == []

    controller.stop()
    third = controller.start()
    assert third.ordinal == 3


def test_abort_finalizes_without_handoff(tmp_path):
    capture = CallRecorder()
    completed = []
    controller = RecordingController(capture, directory=tmp_path, on_complete=completed.append)

    controller.abort()
    controller.start()
    controller.abort()

    assert capture.calls == [("start", "output-1.wav"), ("stop",)]
    assert completed == []
    assert controller.state is RecorderState.IDLE
