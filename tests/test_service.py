"""FlowService lifecycle tests."""

import pytest

from workshop_flow import (
    Actor,
    InspectionResult,
    StepRequiredError,
    TemplateNotFoundError,
    TransitionKind,
    TransitionRequest,
)
from workshop_flow.repositories.progress import InMemoryProgressRepository
from workshop_flow.repositories.template import StaticTemplateRepository
from workshop_flow.services.exceptions import FlowNotFinishedError, FlowNotFoundError
from workshop_flow.services.finalization import RecordingFinalizationSink
from workshop_flow.services.flow import FlowService


@pytest.fixture
def progress_repo():
    return InMemoryProgressRepository()


@pytest.fixture
def sink():
    return RecordingFinalizationSink()


@pytest.fixture
def service(progress_repo, sink):
    return FlowService(
        template_repository=StaticTemplateRepository(),
        progress_repository=progress_repo,
        finalization_sink=sink,
    )


def request(kind, **kwargs):
    return TransitionRequest(kind=kind, **kwargs)


@pytest.mark.asyncio
async def test_open_uses_default_template(service):
    engine = await service.open_flow("build-1", "shop-1")

    assert engine.current_step.id == "mount_handlebar"
    assert await service.open_flow("build-1", "shop-1") is engine


@pytest.mark.asyncio
async def test_unknown_template(service):
    with pytest.raises(TemplateNotFoundError):
        await service.open_flow("build-1", "shop-1", "missing")


@pytest.mark.asyncio
async def test_close_and_resume(service, progress_repo):
    await service.open_flow("build-1", "shop-1", "ebike_assembly", actor=Actor(id="e1", name="Sam"))
    service.apply("build-1", request(TransitionKind.COMPLETE))
    service.apply("build-1", request(TransitionKind.DECIDE, value="hydraulic"))
    service.apply("build-1", request(TransitionKind.NOTE, step_id="check_brake_fluid", text="DOT 4"))

    assert await service.close_flow("build-1") is True
    assert await service.close_flow("build-1") is False

    stored = progress_repo.get("build-1")
    assert stored.notes == {"check_brake_fluid": "DOT 4"}
    assert stored.last_actor.name == "Sam"

    engine = await service.open_flow("build-1", "shop-1", "ebike_assembly")
    assert engine.current_step.id == "check_brake_fluid"
    assert engine.instance.answers == {"brake_system": "hydraulic"}
    assert engine.instance.notes == {"check_brake_fluid": "DOT 4"}


@pytest.mark.asyncio
async def test_validation_errors_surface(service):
    await service.open_flow("build-1", "shop-1")

    with pytest.raises(StepRequiredError):
        service.apply("build-1", request(TransitionKind.SKIP))
    with pytest.raises(FlowNotFoundError):
        service.apply("other", request(TransitionKind.SKIP))


@pytest.mark.asyncio
async def test_finalize_requires_finished_flow(service, sink):
    await service.open_flow("qc-1", "shop-1", "final_inspection")

    with pytest.raises(FlowNotFinishedError):
        await service.finalize("qc-1")

    service.apply("qc-1", request(TransitionKind.COMPLETE))
    service.apply("qc-1", request(TransitionKind.COMPLETE))
    for _ in range(3):
        service.apply("qc-1", request(TransitionKind.SKIP))

    summary = await service.finalize("qc-1")

    assert summary.completed_steps == ["qc_bolts", "qc_brakes"]
    assert summary.skipped_steps == ["qc_gears", "qc_tyres", "qc_accessories"]
    assert summary.all_required_completed is True
    assert sink.finalized == [("qc-1", summary)]
    with pytest.raises(FlowNotFoundError):
        service.get_flow("qc-1")


@pytest.mark.asyncio
async def test_finalize_passes_inspection_to_sink(service, sink):
    await service.open_flow("qc-2", "shop-1", "final_inspection")
    for kind in [TransitionKind.COMPLETE, TransitionKind.COMPLETE]:
        service.apply("qc-2", request(kind))
    for _ in range(3):
        service.apply("qc-2", request(TransitionKind.SKIP))

    summary = await service.finalize("qc-2", InspectionResult(rating=4, feedback="Rear brake squeaks"))

    flow_id, delivered = sink.finalized[0]
    assert flow_id == "qc-2"
    assert delivered.inspection.rating == 4
    assert delivered.inspection.feedback == "Rear brake squeaks"
    assert summary.completed_at is not None
