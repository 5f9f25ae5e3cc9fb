"""FlowEngine transition tests."""

import pytest

from workshop_flow import (
    FlowEngine,
    FlowState,
    InvalidOptionError,
    OutOfRangeError,
    Step,
    StepKindError,
    StepRequiredError,
    TemplateError,
    TransitionKind,
    TransitionRequest,
    UnknownStepError,
)


def action(step_id: str, required: bool = False) -> Step:
    return Step(id=step_id, kind="action", title=step_id.upper(), required=required)


def assert_invariants(engine: FlowEngine):
    inst = engine.instance
    assert not inst.completed & inst.skipped
    assert inst.completed <= set(inst.sequence)
    assert inst.skipped <= set(inst.sequence)
    assert 0 <= inst.cursor < len(inst.sequence)
    assert len(inst.sequence) == len(set(inst.sequence))


def test_fresh_flow_starts_at_first_step(branching_template):
    engine = FlowEngine(branching_template)

    assert engine.cursor == 0
    assert engine.current_step.id == "A"
    assert engine.state == FlowState.IN_PROGRESS
    assert engine.progress() == 0
    assert engine.instance.sequence == ["A", "B", "C"]


def test_empty_template_is_rejected():
    with pytest.raises(TemplateError):
        FlowEngine([])


def test_duplicate_ids_are_rejected():
    with pytest.raises(TemplateError):
        FlowEngine([action("A"), action("A")])


def test_decision_injects_steps_and_finishes(branching_template):
    engine = FlowEngine(branching_template)

    engine.complete()
    engine.decide("x")

    assert engine.instance.sequence == ["A", "B", "B1", "B2", "C"]
    assert engine.current_step.id == "B1"
    assert engine.instance.answers == {"B": "x"}

    engine.complete()
    engine.complete()
    engine.complete()

    assert engine.is_finished()
    assert engine.state == FlowState.FINISHED
    assert engine.progress() == 100
    assert engine.instance.cursor == 4
    assert_invariants(engine)


def test_required_step_cannot_be_skipped():
    engine = FlowEngine([action("A", required=True), action("B")])

    with pytest.raises(StepRequiredError):
        engine.skip()
    assert engine.cursor == 0
    assert engine.instance.completed == set()
    assert engine.instance.skipped == set()

    engine.complete()
    engine.skip()

    assert engine.is_finished()
    assert engine.instance.completed == {"A"}
    assert engine.instance.skipped == {"B"}
    # Reaching the end is not the same as completing everything.
    assert engine.summary().all_required_completed is True
    assert engine.progress() == 100


def test_jump_after_finish_reopens_flow():
    engine = FlowEngine([action("A"), action("B")])
    engine.complete()
    engine.skip()
    assert engine.is_finished()

    engine.jump(0)

    assert engine.cursor == 0
    assert not engine.is_finished()
    assert engine.instance.completed == {"A"}
    assert engine.instance.skipped == {"B"}


def test_back_from_finished_stays_on_last_step():
    engine = FlowEngine([action("A"), action("B")])
    engine.complete()
    engine.complete()

    engine.back()

    assert not engine.is_finished()
    assert engine.cursor == 1

    engine.back()
    assert engine.cursor == 0
    engine.back()
    assert engine.cursor == 0
    assert engine.instance.completed == {"A", "B"}


def test_jump_out_of_range(branching_template):
    engine = FlowEngine(branching_template)

    with pytest.raises(OutOfRangeError):
        engine.jump(3)
    with pytest.raises(OutOfRangeError):
        engine.jump(-1)
    assert engine.cursor == 0


def test_invalid_option_leaves_sequence_unchanged(branching_template):
    engine = FlowEngine(branching_template)
    engine.complete()

    with pytest.raises(InvalidOptionError):
        engine.decide("nope")

    assert engine.instance.sequence == ["A", "B", "C"]
    assert engine.instance.answers == {}
    assert engine.current_step.id == "B"


def test_decide_on_action_step_is_refused(branching_template):
    engine = FlowEngine(branching_template)

    with pytest.raises(StepKindError):
        engine.decide("x")
    assert engine.cursor == 0


def test_complete_on_unanswered_decision_advances_without_injection(branching_template):
    engine = FlowEngine(branching_template)
    engine.complete()
    engine.complete()

    assert engine.cursor == 2
    assert engine.current_step.id == "C"
    assert engine.instance.sequence == ["A", "B", "C"]
    assert "B" in engine.instance.completed
    assert engine.instance.answers == {}
    assert engine.instance.injections == {}


def test_complete_on_answered_decision_keeps_injection(branching_template):
    engine = FlowEngine(branching_template)
    engine.complete()
    engine.decide("y")
    engine.jump(1)
    engine.complete()

    assert engine.current_step.id == "B3"
    assert engine.instance.sequence == ["A", "B", "B3", "C"]


def test_redecide_replaces_previous_injection(branching_template):
    engine = FlowEngine(branching_template)
    engine.complete()
    engine.decide("x")
    engine.complete()  # B1
    engine.skip()  # B2
    engine.set_note("B1", "torque ok")

    engine.jump(1)
    engine.decide("y")

    inst = engine.instance
    assert inst.sequence == ["A", "B", "B3", "C"]
    assert "B1" not in inst.completed
    assert "B2" not in inst.skipped
    assert "B1" not in inst.notes
    assert inst.answers == {"B": "y"}
    assert engine.current_step.id == "B3"
    assert_invariants(engine)


def test_redecide_same_option_does_not_duplicate(branching_template):
    engine = FlowEngine(branching_template)
    engine.complete()
    engine.decide("x")
    engine.complete()

    engine.jump(1)
    engine.decide("x")

    assert engine.instance.sequence == ["A", "B", "B1", "B2", "C"]
    assert "B1" in engine.instance.completed


def test_option_without_steps_still_drops_old_injection(branching_template):
    engine = FlowEngine(branching_template)
    engine.complete()
    engine.decide("x")

    engine.back()
    engine.decide("z")

    assert engine.instance.sequence == ["A", "B", "C"]
    assert engine.instance.injections == {}


def test_nested_injection_is_removed_as_a_tree(nested_template):
    engine = FlowEngine(nested_template)
    engine.decide("deep")
    engine.decide("more")
    assert engine.instance.sequence == ["D", "E", "E1", "D1", "F"]

    engine.jump(0)
    engine.decide("flat")

    inst = engine.instance
    assert inst.sequence == ["D", "D2", "F"]
    assert inst.answers == {"D": "flat"}
    assert set(inst.injections) == {"D"}
    assert inst.completed == {"D"}
    assert_invariants(engine)


def test_revert_restores_untouched_state(branching_template):
    engine = FlowEngine(branching_template)
    engine.complete()
    engine.decide("z")

    engine.revert("A")

    assert "A" not in engine.instance.completed
    assert engine.current_step.id == "C"
    with pytest.raises(UnknownStepError):
        engine.revert("B1")


def test_complete_moves_step_out_of_skipped():
    engine = FlowEngine([action("A"), action("B")])
    engine.skip()
    engine.back()
    engine.complete()

    assert engine.instance.completed == {"A"}
    assert engine.instance.skipped == set()


def test_progress_is_monotone_over_complete_and_skip():
    engine = FlowEngine([action(f"S{i}") for i in range(8)])
    seen = []
    for i in range(8):
        if i % 3 == 0:
            engine.skip()
        else:
            engine.complete()
        seen.append(engine.progress())
        assert_invariants(engine)

    assert seen == sorted(seen)
    assert seen[0] == 13
    assert seen[-1] == 100


def test_notes_are_local_until_next_checkpoint(branching_template):
    saved = []

    class ListBridge:
        def save(self, snapshot):
            saved.append(snapshot)

    engine = FlowEngine(branching_template, bridge=ListBridge())
    engine.set_note("A", "scratch on top tube")
    assert saved == []

    engine.complete()
    assert saved[-1].notes == {"A": "scratch on top tube"}
    assert saved[-1].completed == ["A"]

    engine.set_note("A", "")
    assert "A" not in engine.instance.notes


def test_checkpoint_follows_every_mutating_transition(branching_template):
    saved = []

    class ListBridge:
        def save(self, snapshot):
            saved.append(snapshot)

    engine = FlowEngine(branching_template, bridge=ListBridge())
    engine.complete()
    engine.decide("y")
    engine.back()
    engine.jump(0)
    engine.revert("A")

    assert len(saved) == 3
    assert saved[1].sequence_ids == ["A", "B", "B3", "C"]
    assert saved[-1].completed == ["B"]


def test_failing_bridge_does_not_block_progress(branching_template):
    class BrokenBridge:
        def save(self, snapshot):
            raise RuntimeError("disk full")

    engine = FlowEngine(branching_template, bridge=BrokenBridge())
    engine.complete()

    assert engine.current_step.id == "B"
    assert engine.instance.completed == {"A"}


def test_transition_dispatch(branching_template):
    engine = FlowEngine(branching_template)

    view = engine.transition(TransitionRequest(kind=TransitionKind.COMPLETE))
    assert view.cursor == 1

    view = engine.transition(TransitionRequest(kind=TransitionKind.DECIDE, value="x"))
    assert view.total == 5
    assert [s.id for s in view.steps if s.injected] == ["B1", "B2"]

    view = engine.transition(
        TransitionRequest(kind=TransitionKind.NOTE, step_id="B1", text="check")
    )
    assert view.notes == {"B1": "check"}

    view = engine.transition(TransitionRequest(kind=TransitionKind.JUMP, index=0))
    assert view.current_step.id == "A"
    assert view.steps[0].status == "completed"
    assert view.steps[2].status == "open"


def test_transition_request_requires_arguments():
    with pytest.raises(ValueError):
        TransitionRequest(kind=TransitionKind.DECIDE)
    with pytest.raises(ValueError):
        TransitionRequest(kind=TransitionKind.NOTE, step_id="A")


def test_summary_reports_missing_required_steps():
    engine = FlowEngine([action("A"), action("B", required=True), action("C")])
    engine.complete()
    engine.jump(2)
    engine.complete()

    summary = engine.summary()
    assert engine.is_finished()
    assert summary.completed_steps == ["A", "C"]
    assert summary.all_required_completed is False
