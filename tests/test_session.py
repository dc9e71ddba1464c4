"""Tests for the streaming render session."""

import sys
from unittest.mock import Mock

import pytest

from diagram_stream.config import StreamConfig
from diagram_stream.keys import ElementKeyer
from diagram_stream.recover import DepthScanRecoverer, FinalParseError
from diagram_stream.session import HostBridge, StreamingSession


SNAPSHOTS = [
    '[{"type":"rectangle","id":"r1"}',
    '[{"type":"rectangle","id":"r1"},{"type":"ell',
    '[{"type":"rectangle","id":"r1"},{"type":"ellipse","id":"e1"}',
    '[{"type":"rectangle","id":"r1"},{"type":"ellipse","id":"e1"},{"type":"arrow","id":"a1"}]',
]

R1 = {"type": "rectangle", "id": "r1"}
E1 = {"type": "ellipse", "id": "e1"}
A1 = {"type": "arrow", "id": "a1"}


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def bridge():
    return Mock(spec=HostBridge)


@pytest.fixture
def session(bridge):
    return StreamingSession(bridge)


class TestStreamingSession:
    """Test driving a bridge from streamed tool input."""

    def test_progressive_snapshots(self, session, bridge):
        """Test that only stable elements are rendered as snapshots grow."""
        results = [session.on_tool_input_partial("call-1", s) for s in SNAPSHOTS]

        assert results == [[], [], [R1], [R1, E1]]
        assert bridge.render.call_count == 2

        tool_call_id, elements, diff = bridge.render.call_args_list[0].args
        assert tool_call_id == "call-1"
        assert elements == [R1]
        assert diff.added == ["r1"]

        _, elements, diff = bridge.render.call_args_list[1].args
        assert elements == [R1, E1]
        assert diff.added == ["e1"]

    def test_deltas(self, session, bridge):
        text = SNAPSHOTS[-1]
        for i in range(0, len(text), 5):
            session.on_tool_input_delta("call-1", text[i:i + 5])

        assert session.buffer.text == text
        assert session.rendered == [R1, E1]

    def test_unchanged_snapshot_not_rendered(self, session, bridge):
        session.on_tool_input_partial("call-1", SNAPSHOTS[2])
        session.on_tool_input_partial("call-1", SNAPSHOTS[2] + ',{"type"')

        assert bridge.render.call_count == 1

    def test_complete(self, session, bridge):
        session.on_tool_input_partial("call-1", SNAPSHOTS[2])
        elements = session.on_tool_input_complete("call-1", SNAPSHOTS[3])

        assert elements == [R1, E1, A1]
        bridge.finalize.assert_called_once_with("call-1", [R1, E1, A1])
        assert session.rendered == [R1, E1, A1]

    def test_complete_uses_buffered_text(self, session, bridge):
        session.on_tool_input_delta("call-1", SNAPSHOTS[3])
        assert session.on_tool_input_complete("call-1") == [R1, E1, A1]

    def test_complete_with_invalid_text(self, session, bridge):
        """Test that a failed final parse is reported and raised."""
        session.on_tool_input_partial("call-1", SNAPSHOTS[2])

        with pytest.raises(FinalParseError):
            session.on_tool_input_complete("call-1")

        bridge.report_error.assert_called_once()
        tool_call_id, error = bridge.report_error.call_args.args
        assert tool_call_id == "call-1"
        assert isinstance(error, FinalParseError)
        bridge.finalize.assert_not_called()

    def test_new_tool_call_replaces_buffer(self, session, bridge):
        session.on_tool_input_partial("call-1", SNAPSHOTS[2])
        result = session.on_tool_input_delta("call-2", '[{"id":"x"}')

        assert result == []
        assert session.tool_call_id == "call-2"
        assert session.buffer.text == '[{"id":"x"}'
        assert session.rendered == []

    def test_cancel(self, session, bridge):
        session.on_tool_input_partial("call-1", SNAPSHOTS[2])
        session.on_tool_cancelled("call-1")

        assert session.tool_call_id is None
        assert session.buffer.text == ""
        assert session.rendered == []

    def test_cancel_other_call_ignored(self, session, bridge):
        session.on_tool_input_partial("call-1", SNAPSHOTS[2])
        session.on_tool_cancelled("call-9")

        assert session.tool_call_id == "call-1"
        assert session.rendered == [R1]

    def test_render_failure_does_not_stop_stream(self, session, bridge):
        bridge.render.side_effect = [RuntimeError("canvas gone"), None]

        assert session.on_tool_input_partial("call-1", SNAPSHOTS[2]) == [R1]
        assert session.rendered == []

        session.on_tool_input_partial("call-1", SNAPSHOTS[2] + ",")
        assert session.rendered == [R1]
        assert bridge.render.call_count == 2

    def test_debounce(self, bridge):
        clock = FakeClock()
        session = StreamingSession(bridge, config=StreamConfig(render_interval=1.0), clock=clock)

        session.on_tool_input_partial("call-1", SNAPSHOTS[2])
        clock.now = 0.5
        session.on_tool_input_partial("call-1", SNAPSHOTS[3][:-1] + ',{"id":')
        assert bridge.render.call_count == 1
        assert session.rendered == [R1]

        clock.now = 1.5
        session.on_tool_input_partial("call-1", SNAPSHOTS[3][:-1] + ',{"id":"a')
        assert bridge.render.call_count == 2
        assert session.rendered == [R1, E1]

    def test_custom_recoverer_and_keyer(self, bridge):
        session = StreamingSession(
            bridge,
            recoverer=DepthScanRecoverer(),
            keyer=ElementKeyer("$.type")
        )
        result = session.on_tool_input_partial(
            "call-1", '[{"type":"a"},{"type":"b"},{"type":"c","text":"}'
        )

        assert result == [{"type": "a"}]
        _, _, diff = bridge.render.call_args.args
        assert diff.added == ["a"]

    def test_config_selects_recoverer(self, bridge):
        session = StreamingSession(bridge, config=StreamConfig(recovery="depth"))
        assert isinstance(session.recoverer, DepthScanRecoverer)

    def test_sessions_are_independent(self):
        first_bridge = Mock(spec=HostBridge)
        second_bridge = Mock(spec=HostBridge)
        first = StreamingSession(first_bridge)
        second = StreamingSession(second_bridge)

        first.on_tool_input_partial("call-1", SNAPSHOTS[2])

        assert second.rendered == []
        second_bridge.render.assert_not_called()


class TestHostBridge:
    """Test the default logging bridge."""

    def test_defaults_do_not_raise(self):
        session = StreamingSession(HostBridge())

        for snapshot in SNAPSHOTS:
            session.on_tool_input_partial("call-1", snapshot)
        assert session.on_tool_input_complete("call-1") == [R1, E1, A1]

    def test_default_report_error_logs(self, caplog):
        HostBridge().report_error("call-1", FinalParseError("bad"))
        assert "call-1" in caplog.text


class TestDuplicateKeys:
    """Test rendering when several elements share a key."""

    def test_growth_with_repeated_id_is_rendered(self, session, bridge):
        session.on_tool_input_partial("call-1", '[{"id":"x"},{"id":"x"}')
        assert session.rendered == [{"id": "x"}]

        result = session.on_tool_input_partial("call-1", '[{"id":"x"},{"id":"x"},{"id":"y"}')

        assert result == [{"id": "x"}, {"id": "x"}]
        assert session.rendered == [{"id": "x"}, {"id": "x"}]
        assert bridge.render.call_count == 2
        _, _, diff = bridge.render.call_args.args
        assert diff.reordered

    def test_change_in_earlier_duplicate_is_rendered(self, session, bridge):
        session.on_tool_input_partial("call-1", '[{"id":"x","v":1},{"id":"x","v":2},{')
        session.on_tool_input_partial("call-1", '[{"id":"x","v":9},{"id":"x","v":2},{')

        assert bridge.render.call_count == 2
        assert session.rendered == [{"id": "x", "v": 9}]


class TestOversizedFinalInput:
    """Test that every final parse failure reaches the bridge."""

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"),
                        reason="interpreter has no integer string conversion limit")
    def test_integer_digit_limit_is_reported(self, session, bridge):
        text = '[{"id":"a","x":' + "1" * 5000 + '}]'

        assert session.on_tool_input_partial("call-1", text) == []
        with pytest.raises(FinalParseError):
            session.on_tool_input_complete("call-1")

        bridge.report_error.assert_called_once()
