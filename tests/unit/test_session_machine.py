from marathon import machine
from marathon.machine import (
    add_warning,
    next_round,
    reset_session,
    start_session,
    submit_round,
    view_feedback,
)


def test_start_session_defaults():
    session = start_session("1")
    assert session.company_id == "1"
    assert session.current_round_index == 0
    assert session.is_round_submitted is False
    assert session.is_feedback_viewed is False
    assert session.warnings == 0
    assert session.is_terminated is False
    assert session.scores == {}
    assert session.round_feedback is None


def test_two_round_walkthrough():
    session = start_session("1")

    session = submit_round(session, 72, "solid aptitude")
    assert session.scores == {0: 72}
    assert session.is_round_submitted is True
    assert session.round_feedback == "solid aptitude"

    session = view_feedback(session)
    assert session.is_feedback_viewed is True

    session = next_round(session)
    assert session.current_round_index == 1
    assert session.is_round_submitted is False
    assert session.is_feedback_viewed is False
    assert session.round_feedback is None

    session = submit_round(session, 88, "clean code")
    assert session.scores == {0: 72, 1: 88}


def test_three_warnings_terminate():
    session = start_session("1")
    session = add_warning(add_warning(session))
    assert session.warnings == 2
    assert session.is_terminated is False

    session = add_warning(session)
    assert session.warnings == 3
    assert session.is_terminated is True

    session = add_warning(session)
    assert session.warnings == 4
    assert session.is_terminated is True


def test_submit_still_applies_after_termination():
    session = start_session("1")
    for _ in range(3):
        session = add_warning(session)
    session = submit_round(session, 40, "late")
    assert session.is_terminated is True
    assert session.scores == {0: 40}


def test_resubmit_overwrites_score_and_feedback():
    session = submit_round(start_session("1"), 30, "first")
    session = view_feedback(session)
    session = submit_round(session, 65, "second")
    assert session.scores == {0: 65}
    assert session.round_feedback == "second"
    assert session.is_feedback_viewed is False


def test_out_of_range_score_is_kept():
    session = submit_round(start_session("1"), 150, "generous")
    assert session.scores[0] == 150
    session = submit_round(session, -5, "harsh")
    assert session.scores[0] == -5


def test_transitions_do_not_mutate_input():
    original = start_session("1")
    submitted = submit_round(original, 50, "fb")
    assert original.scores == {}
    assert original.is_round_submitted is False
    advanced = next_round(submitted)
    assert submitted.current_round_index == 0
    assert advanced.scores == {0: 50}
    submit_round(advanced, 90, "fb")
    assert submitted.scores == {0: 50}
    assert advanced.scores == {0: 50}


def test_absent_session_is_noop():
    assert add_warning(None) is None
    assert submit_round(None, 10, "x") is None
    assert view_feedback(None) is None
    assert next_round(None) is None
    assert reset_session(None) is None


def test_view_feedback_is_idempotent():
    session = submit_round(start_session("1"), 70, "fb")
    once = view_feedback(session)
    twice = view_feedback(once)
    assert once == twice
    assert twice.is_feedback_viewed is True
    assert twice.model_dump(exclude={"is_feedback_viewed"}) == session.model_dump(exclude={"is_feedback_viewed"})


def test_view_feedback_before_submit_has_no_other_effect():
    session = view_feedback(start_session("1"))
    assert session.is_feedback_viewed is True
    assert session.is_round_submitted is False


def test_next_round_runs_past_workflow_end():
    session = start_session("1")
    for _ in range(5):
        session = next_round(session)
    assert session.current_round_index == 5


def test_reset_then_restart_is_fresh():
    session = start_session("1")
    for _ in range(3):
        session = add_warning(session)
    assert reset_session(session) is None

    restarted = start_session("1")
    assert restarted.warnings == 0
    assert restarted.is_terminated is False


def test_round_index_and_warnings_are_monotonic():
    steps = [
        lambda s: add_warning(s),
        lambda s: submit_round(s, 55, "fb"),
        view_feedback,
        next_round,
        lambda s: submit_round(s, 60, "fb"),
        lambda s: add_warning(s),
        next_round,
        view_feedback,
    ]
    session = start_session("1")
    for step in steps:
        updated = step(session)
        assert updated.current_round_index >= session.current_round_index
        if updated.current_round_index > session.current_round_index:
            assert step is next_round
        assert updated.warnings >= session.warnings
        assert updated.is_terminated == (updated.warnings >= machine.WARNING_LIMIT)
        session = updated


def test_custom_warning_limit():
    session = add_warning(start_session("1"), limit=1)
    assert session.is_terminated is True
