"""
Engine - Guided Step-Flow State Machine

The FlowEngine is the deterministic state machine that walks a technician
through a checklist one step at a time. It is the only component allowed
to mutate a FlowInstance.
-----------------------------------------------

The machine has two states:
1. IN_PROGRESS(cursor): the cursor references the step being worked on.
   complete / skip / decide act on that step and advance the cursor.
2. FINISHED: reached by advancing past the last step. Left again only via
   jump() or back(), so a technician can amend a checklist before the
   final hand-off.

The topology is dynamic: a decision answer can splice sub-steps into the
sequence. Every splice is recorded as an Injection (a provenance tag) so a
later, different answer removes exactly what the earlier answer added.

Every transition either applies fully or raises a FlowValidationError with
the instance untouched. Checkpoints go to the PersistenceBridge, which is
fire-and-forget: the in-memory instance is authoritative for the session.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Sequence, Set, Union

from ..domain.models import ChecklistTemplate, DecisionOption, Step, validate_template
from ..exceptions import (
    InvalidOptionError,
    OutOfRangeError,
    StepKindError,
    StepRequiredError,
    UnknownStepError,
    WorkshopFlowError,
)
from ..persistence.bridge import PersistenceBridge
from ..state.models import FlowInstance, FlowSummary, Injection, ProgressSnapshot
from .schemas.transitions import (
    FlowState,
    FlowView,
    StepIndicator,
    TransitionKind,
    TransitionRequest,
)

logger = logging.getLogger(__name__)


class FlowEngine:
    def __init__(
        self,
        template: Union[ChecklistTemplate, Sequence[Step]],
        snapshot: Optional[ProgressSnapshot] = None,
        bridge: Optional[PersistenceBridge] = None,
    ):
        steps = list(template.steps if isinstance(template, ChecklistTemplate) else template)
        validate_template(steps)

        self.template: List[Step] = steps
        self.bridge = bridge
        self.instance = FlowInstance(
            sequence=[step.id for step in steps],
            steps={step.id: step for step in steps},
        )

        if snapshot is not None:
            self._resume(snapshot)

    # ==========================================================================
    # Read Side
    # ==========================================================================

    @property
    def current_step(self) -> Optional[Step]:
        return self.instance.current_step

    @property
    def cursor(self) -> int:
        return self.instance.cursor

    @property
    def state(self) -> FlowState:
        return FlowState.FINISHED if self.instance.finished else FlowState.IN_PROGRESS

    def is_finished(self) -> bool:
        return self.instance.finished

    def progress(self) -> int:
        """Percentage of materialized steps that are completed or skipped."""
        total = len(self.instance.sequence)
        if total == 0:
            return 0
        done = len(self.instance.completed) + len(self.instance.skipped)
        # Half-up, so 1 of 8 steps reads 13 rather than 12.
        return math.floor(100 * done / total + 0.5)

    def snapshot(self) -> ProgressSnapshot:
        inst = self.instance
        return ProgressSnapshot(
            sequence_ids=list(inst.sequence),
            completed=inst.ordered(inst.completed),
            skipped=inst.ordered(inst.skipped),
            notes=dict(inst.notes),
            answers=dict(inst.answers),
        )

    def summary(self) -> FlowSummary:
        inst = self.instance
        injected = self._injected_ids()
        return FlowSummary(
            completed_steps=inst.ordered(inst.completed),
            skipped_steps=inst.ordered(inst.skipped),
            answers=dict(inst.answers),
            notes=dict(inst.notes),
            all_required_completed=all(
                step_id in inst.completed
                for step_id in inst.sequence
                if inst.steps[step_id].required
            ),
            injected_steps=[inst.steps[s] for s in inst.sequence if s in injected],
        )

    def view(self) -> FlowView:
        inst = self.instance
        injected = self._injected_ids()
        indicators = []
        for step_id in inst.sequence:
            step = inst.steps[step_id]
            if step_id in inst.completed:
                status = "completed"
            elif step_id in inst.skipped:
                status = "skipped"
            else:
                status = "open"
            indicators.append(
                StepIndicator(
                    id=step.id,
                    title=step.title,
                    kind=step.kind,
                    required=step.required,
                    status=status,
                    injected=step_id in injected,
                )
            )

        return FlowView(
            state=self.state,
            cursor=inst.cursor,
            total=len(inst.sequence),
            progress=self.progress(),
            current_step=self.current_step,
            steps=indicators,
            notes=dict(inst.notes),
            answers=dict(inst.answers),
        )

    # ==========================================================================
    # Transitions
    # ==========================================================================

    def transition(self, request: TransitionRequest) -> FlowView:
        """
        Dispatches a gesture from the presentation shell and returns the
        recomputed view.
        """
        handlers: Dict[TransitionKind, Callable[[], None]] = {
            TransitionKind.COMPLETE: self.complete,
            TransitionKind.SKIP: self.skip,
            TransitionKind.DECIDE: lambda: self.decide(request.value),
            TransitionKind.BACK: self.back,
            TransitionKind.JUMP: lambda: self.jump(request.index),
            TransitionKind.REVERT: lambda: self.revert(request.step_id),
            TransitionKind.NOTE: lambda: self.set_note(request.step_id, request.text),
        }
        handlers[request.kind]()
        return self.view()

    def complete(self) -> None:
        step = self._require_current()
        self.instance.skipped.discard(step.id)
        self.instance.completed.add(step.id)
        logger.debug(f"Completed step '{step.id}' at index {self.instance.cursor}")

        self._advance()
        self.checkpoint()

    def skip(self) -> None:
        step = self._require_current()
        if step.required:
            raise StepRequiredError(step.id)

        self.instance.completed.discard(step.id)
        self.instance.skipped.add(step.id)
        logger.debug(f"Skipped step '{step.id}' at index {self.instance.cursor}")

        self._advance()
        self.checkpoint()

    def decide(self, value: str) -> None:
        step = self._require_current()
        if not step.is_decision:
            raise StepKindError(step.id, step.kind)
        option = step.option(value)
        if option is None:
            raise InvalidOptionError(step.id, value)

        previous = self.instance.answers.get(step.id)
        if previous != value:
            removed = self._remove_injection(step.id)
            if removed:
                logger.info(
                    f"Decision '{step.id}' changed from '{previous}' to '{value}', "
                    f"removed {len(removed)} injected step(s)"
                )
            self._inject(step, option)

        self.instance.answers[step.id] = value
        self.instance.skipped.discard(step.id)
        self.instance.completed.add(step.id)
        logger.debug(f"Decided '{value}' on step '{step.id}'")

        self._advance()
        self.checkpoint()

    def back(self) -> None:
        inst = self.instance
        if inst.finished:
            # Leave FINISHED onto the step that was just closed.
            inst.finished = False
        elif inst.cursor > 0:
            inst.cursor -= 1
        logger.debug(f"Moved back to index {inst.cursor}")

    def jump(self, index: int) -> None:
        inst = self.instance
        if not 0 <= index < len(inst.sequence):
            raise OutOfRangeError(index, len(inst.sequence))
        inst.cursor = index
        inst.finished = False
        logger.debug(f"Jumped to index {index}")

    def revert(self, step_id: str) -> None:
        self._require_known(step_id)
        self.instance.completed.discard(step_id)
        self.instance.skipped.discard(step_id)
        logger.debug(f"Reverted step '{step_id}'")
        self.checkpoint()

    def set_note(self, step_id: str, text: str) -> None:
        """
        Local-only edit; the note rides along with the next checkpoint.
        """
        self._require_known(step_id)
        if text:
            self.instance.notes[step_id] = text
        else:
            self.instance.notes.pop(step_id, None)

    # ==========================================================================
    # Sequence Topology
    # ==========================================================================

    def _inject(self, decision: Step, option: DecisionOption) -> None:
        if not option.injected_steps:
            return
        inst = self.instance
        position = inst.sequence.index(decision.id) + 1
        new_ids = [step.id for step in option.injected_steps]

        inst.sequence[position:position] = new_ids
        for step in option.injected_steps:
            inst.steps[step.id] = step
        inst.injections[decision.id] = Injection(
            decision_step_id=decision.id,
            option_value=option.value,
            step_ids=new_ids,
        )

    def _remove_injection(self, decision_id: str) -> List[str]:
        """
        Removes the sub-tree injected by a decision, including anything the
        injected decisions injected in turn. Returns the removed ids.
        """
        removed = self._collect_injected(decision_id)
        if not removed:
            return removed

        inst = self.instance
        gone = set(removed)
        inst.sequence = [step_id for step_id in inst.sequence if step_id not in gone]
        inst.completed -= gone
        inst.skipped -= gone
        for step_id in removed:
            inst.steps.pop(step_id, None)
            inst.answers.pop(step_id, None)
            inst.notes.pop(step_id, None)
        return removed

    def _collect_injected(self, decision_id: str) -> List[str]:
        injection = self.instance.injections.pop(decision_id, None)
        if injection is None:
            return []
        collected = []
        for step_id in injection.step_ids:
            collected.append(step_id)
            collected.extend(self._collect_injected(step_id))
        return collected

    def _injected_ids(self) -> Set[str]:
        return {
            step_id
            for injection in self.instance.injections.values()
            for step_id in injection.step_ids
        }

    # ==========================================================================
    # Resume
    # ==========================================================================

    def _resume(self, snapshot: ProgressSnapshot) -> None:
        """
        Rehydrates from a stored snapshot. The template defines the order;
        injected sub-sequences are regenerated by replaying the recorded
        answers, so steps that no longer exist simply drop out.
        """
        inst = self.instance
        applied = self._replay_answers(snapshot.answers)
        inst.answers = {
            step_id: value
            for step_id, value in snapshot.answers.items()
            if step_id in applied
        }

        members = set(inst.sequence)
        inst.completed = {s for s in snapshot.completed if s in members}
        inst.skipped = {
            s for s in snapshot.skipped if s in members and s not in inst.completed
        }
        inst.notes = {s: text for s, text in snapshot.notes.items() if s in members}

        dropped = [s for s in snapshot.sequence_ids if s not in members]
        if dropped:
            logger.info(f"Dropped {len(dropped)} step(s) no longer in template: {dropped}")

        touched = inst.completed | inst.skipped
        first_open = next(
            (i for i, step_id in enumerate(inst.sequence) if step_id not in touched),
            None,
        )
        if first_open is None:
            inst.cursor = len(inst.sequence) - 1
            inst.finished = True
        else:
            inst.cursor = first_open
            inst.finished = False

        logger.info(
            f"Resumed flow at index {inst.cursor} of {len(inst.sequence)} "
            f"({len(inst.completed)} completed, {len(inst.skipped)} skipped)"
        )

    def _replay_answers(self, answers: Dict[str, str]) -> Set[str]:
        """
        Re-applies answers in answer order. Repeated passes let a nested
        decision find the steps its parent's answer injects.
        """
        applied: Set[str] = set()
        pending = dict(answers)
        progressed = True

        while pending and progressed:
            progressed = False
            for step_id, value in list(pending.items()):
                step = self.instance.steps.get(step_id)
                if step is None:
                    continue
                del pending[step_id]
                progressed = True
                option = step.option(value) if step.is_decision else None
                if option is None:
                    logger.warning(f"Ignoring stale answer '{value}' for step '{step_id}'")
                    continue
                self._inject(step, option)
                applied.add(step_id)

        if pending:
            logger.info(f"Ignoring answers for steps no longer reachable: {list(pending)}")
        return applied

    # ==========================================================================
    # Standard Helpers
    # ==========================================================================

    def _require_current(self) -> Step:
        step = self.instance.current_step
        if step is None:
            raise WorkshopFlowError("Flow instance has an empty sequence.")
        return step

    def _require_known(self, step_id: str) -> None:
        if step_id not in self.instance.steps:
            raise UnknownStepError(step_id)

    def _advance(self) -> None:
        inst = self.instance
        if inst.cursor < len(inst.sequence) - 1:
            inst.cursor += 1
        else:
            inst.finished = True
            logger.info("Flow finished")

    def checkpoint(self) -> None:
        """Hands the complete current snapshot to the bridge, if any."""
        if self.bridge is None:
            return
        try:
            self.bridge.save(self.snapshot())
        except Exception:
            # Persistence must never block or undo local progress.
            logger.exception("Checkpoint hand-off to persistence bridge failed")
