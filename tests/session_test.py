import math

import pytest

from autoleveler.autolevel.grid import ProbePoint, plan
from autoleveler.autolevel.session import (
    DEFAULT_STATE,
    ProbeEvent,
    ProbeRunOptions,
    ProbeSession,
    ProbedSample,
    SessionPhase,
)
from autoleveler.utils.exceptions import InvalidParameterError


@pytest.fixture
def session():
    return ProbeSession()


@pytest.fixture
def two_point_options():
    return {
        "positions": [ProbePoint(0.0, 0.0), ProbePoint(10.0, 0.0)],
        "feedrate": 500,
        "probe_feedrate": 20,
        "start_z": 5,
        "end_z": -5,
    }


def armed(session, count):
    session.start({"positions": plan(0, 10 * (count - 1), 10, 0, 0, 10)})
    return session


def test_two_point_program(session, two_point_options):
    program = session.start(two_point_options)
    assert program == [
        "(Auto Leveling: probing point 0)",
        "G90",
        "G0 Z5",
        "G0 X0 Y0 F500",
        "G38.2 Z-5 F10",
        "G0 Z5",
        "(Auto Leveling: probing point 1)",
        "G90",
        "G0 X10 Y0 F500",
        "G38.2 Z-5 F20",
        "G0 Z5",
    ]


def test_camel_case_options(session):
    program = session.start(
        {"positions": [{"x": 1, "y": 2}], "feedrate": 300, "probeFeedrate": 40, "startZ": 3, "endZ": -1}
    )
    assert program[2:] == ["G0 Z3", "G0 X1 Y2 F300", "G38.2 Z-1 F20", "G0 Z3"]


def test_defaults_and_missing_feedrate(session):
    program = session.start({"positions": [(4, 5), (6, 7)]})
    assert program[2:6] == ["G0 Z0", "G0 X4 Y5", "G38.2 Z0 F10", "G0 Z0"]
    assert program[8:] == ["G0 X6 Y7", "G38.2 Z0 F20", "G0 Z0"]


def test_start_accepts_options_object_and_callback(session):
    received = []
    options = ProbeRunOptions(positions=(ProbePoint(1, 1),), feedrate=100)
    program = session.start(options, received.append)
    assert received == [program]
    assert len(program) == 6


def test_start_sets_count_and_phase(session, two_point_options):
    session.start(two_point_options)
    assert session.state.probe_point_count == 2
    assert session.state.probed_positions == ()
    assert session.phase is SessionPhase.ARMED
    assert session.remaining() == 2


def test_start_with_no_positions(session):
    assert session.start({"positions": []}) == []
    assert session.state == DEFAULT_STATE
    assert session.probe_update({"x": 0, "y": 0, "z": 1}) is False


def test_aggregation(session):
    armed(session, 3)
    session.probe_update({"x": 0, "y": 0, "z": 1.0})
    assert session.state.min_z == 1.0
    assert session.state.max_z == 1.0
    assert session.phase is SessionPhase.COLLECTING

    session.probe_update({"x": 10, "y": 0, "z": -2.0})
    session.probe_update({"x": 20, "y": 0, "z": 3.0})
    assert session.state.min_z == -2.0
    assert session.state.max_z == 3.0
    assert session.phase is SessionPhase.COMPLETE
    assert session.is_complete()


def test_samples_keep_delivery_order(session):
    armed(session, 2)
    session.probe_update({"x": 10, "y": 0, "z": 0.5})
    session.probe_update({"x": 0, "y": 0, "z": 0.25})
    assert session.state.probed_positions == (ProbedSample(10, 0, 0.5), ProbedSample(0, 0, 0.25))


def test_saturation(session):
    armed(session, 2)
    assert session.probe_update({"x": 0, "y": 0, "z": 1.0})
    assert session.probe_update({"x": 10, "y": 0, "z": 2.0})
    before = session.state
    assert session.probe_update({"x": 20, "y": 0, "z": -9.0}) is False
    assert session.state is before
    assert len(session.state.probed_positions) == 2
    assert (session.state.min_z, session.state.max_z) == (1.0, 2.0)


def test_update_without_start_is_ignored(session):
    assert session.probe_update({"x": 0, "y": 0, "z": 1}) is False
    assert session.state == DEFAULT_STATE


def test_state_is_replaced_not_mutated(session):
    armed(session, 2)
    snapshot = session.state
    session.probe_update({"x": 0, "y": 0, "z": 1.0})
    assert snapshot.probed_positions == ()
    assert session.state is not snapshot


def test_wrapped_and_object_positions(session):
    armed(session, 2)
    session.probe_update({"pos": {"x": 1, "y": 2, "z": 3}})
    session.probe_update(ProbedSample(4.0, 5.0, 6.0))
    assert [s.as_tuple() for s in session.state.probed_positions] == [(1, 2, 3), (4, 5, 6)]


def test_missing_z_poisons_aggregate_without_raising(session):
    armed(session, 3)
    session.probe_update({"x": 0, "y": 0, "z": 1.0})
    session.probe_update({"x": 10, "y": 0})
    assert session.state.probed_positions[1].degraded
    assert math.isnan(session.state.min_z)
    assert math.isnan(session.state.max_z)
    session.probe_update({"x": 20, "y": 0, "z": 0.5})
    assert math.isnan(session.state.min_z)


def test_first_sample_without_z(session):
    armed(session, 2)
    session.probe_update({"x": 0, "y": 0, "z": None})
    assert session.state.min_z is None
    assert session.state.max_z is None


def test_garbage_update_does_not_raise(session):
    armed(session, 1)
    assert session.probe_update("not a position") is True
    assert session.state.probed_positions[0] == ProbedSample(None, None, None)


def test_probe_end_emitted_for_every_update(session):
    ends = []
    session.add_listener("probe_end", lambda: ends.append(session.state.probed_count()))
    armed(session, 3)
    session.probe_update({"x": 0, "y": 0, "z": 1})
    session.probe_update({"x": 10, "y": 0, "z": 1})
    assert ends == [1, 2]
    session.probe_update({"x": 20, "y": 0, "z": 1})
    session.probe_update({"x": 30, "y": 0, "z": 1})
    assert ends == [1, 2, 3]


def test_update_listener_receives_sample(session):
    samples = []
    session.add_listener(ProbeEvent.UPDATE, samples.append)
    armed(session, 1)
    session.probe_update({"x": 0, "y": 0, "z": 2})
    assert samples == [ProbedSample(0, 0, 2)]


def test_failing_listener_does_not_break_session(session):
    def boom():
        raise RuntimeError("listener failure")

    session.add_listener("probe_end", boom)
    armed(session, 1)
    assert session.probe_update({"x": 0, "y": 0, "z": 2}) is True
    assert session.is_complete()


def test_remove_listener(session):
    calls = []
    session.add_listener("probe_start", calls.append)
    session.remove_listener("probe_start", calls.append)
    session.remove_listener("probe_start", calls.append)
    session.probe_start()
    assert calls == []


def test_handle_event_routes_by_name(session):
    starts = []
    session.add_listener("probe_start", lambda: starts.append(True))
    armed(session, 1)
    session.handle_event("probe_start")
    session.handle_event("probe_update", {"pos": {"x": 0, "y": 0, "z": -1}})
    session.handle_event(ProbeEvent.END)
    assert starts == [True]
    assert session.state.min_z == -1


def test_unknown_event(session):
    with pytest.raises(InvalidParameterError):
        session.handle_event("probe_explode")
    with pytest.raises(InvalidParameterError):
        session.add_listener("nope", print)


def test_stop_then_start_begins_clean(session, two_point_options):
    session.start(two_point_options)
    session.probe_update({"x": 0, "y": 0, "z": 1})
    session.stop()
    assert session.state == DEFAULT_STATE
    assert session.phase is SessionPhase.IDLE

    session.start({"positions": []})
    assert session.state.probe_point_count == 0
    assert session.state.probed_positions == ()
    assert session.state.min_z is None
    assert session.state.max_z is None


def test_restart_discards_partial_run(session, two_point_options):
    session.start(two_point_options)
    session.probe_update({"x": 0, "y": 0, "z": 1})
    session.start(two_point_options)
    assert session.state.probed_positions == ()
    assert session.state.min_z is None
    assert session.state.probe_point_count == 2


def test_stop_is_safe_when_idle(session):
    session.stop()
    session.stop()
    assert session.state == DEFAULT_STATE


def test_reset_state_keeps_phase(session, two_point_options):
    session.start(two_point_options)
    session.reset_state()
    assert session.state == DEFAULT_STATE
    assert session.phase is SessionPhase.ARMED


def test_numeric_strings_in_options(session):
    program = session.start(
        {"positions": [("1", "2")], "feedrate": "300", "probeFeedrate": "20", "startZ": "5", "endZ": "-5"}
    )
    assert program[2:] == ["G0 Z5", "G0 X1 Y2 F300", "G38.2 Z-5 F10", "G0 Z5"]


def test_non_numeric_option_is_rejected(session):
    with pytest.raises(InvalidParameterError):
        session.start({"positions": [(0, 0)], "probe_feedrate": "fast"})
    assert session.state == DEFAULT_STATE


def test_short_and_unreadable_positions_omit_words(session):
    program = session.start({"positions": [(7,), {"x": "abc", "y": 3}, ()]})
    assert program[3] == "G0 X7"
    assert program[8] == "G0 Y3"
    assert program[13] == "G0"
    assert session.state.probe_point_count == 3
