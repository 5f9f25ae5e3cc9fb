import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from workshop_flow.domain.models import DecisionOption, Step
from workshop_flow.infrastructure.database.connection import init_db


def action(step_id: str, required: bool = False) -> Step:
    return Step(id=step_id, kind="action", title=step_id.upper(), required=required)


@pytest.fixture
def branching_template():
    """A(action), B(decision: x injects [B1, B2], y injects [B3]), C(action)."""
    return [
        action("A"),
        Step(
            id="B",
            kind="decision",
            title="Pick one",
            options=[
                DecisionOption(label="X", value="x", injected_steps=[action("B1"), action("B2")]),
                DecisionOption(label="Y", value="y", injected_steps=[action("B3")]),
                DecisionOption(label="Z", value="z"),
            ],
        ),
        action("C"),
    ]


@pytest.fixture
def nested_template():
    """D's option 'deep' injects a decision E that injects E1 on 'more'."""
    inner = Step(
        id="E",
        kind="decision",
        title="Inner",
        options=[
            DecisionOption(label="More", value="more", injected_steps=[action("E1")]),
            DecisionOption(label="Less", value="less"),
        ],
    )
    return [
        Step(
            id="D",
            kind="decision",
            title="Outer",
            options=[
                DecisionOption(label="Deep", value="deep", injected_steps=[inner, action("D1")]),
                DecisionOption(label="Flat", value="flat", injected_steps=[action("D2")]),
            ],
        ),
        action("F"),
    ]


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine
