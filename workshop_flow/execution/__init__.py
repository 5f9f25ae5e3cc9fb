"""
Execution Layer - Guided Step-Flow Engine

Defines the FlowEngine (deterministic state machine over a checklist) and
the request/view schemas the presentation shell talks to it with.
"""

from workshop_flow.execution.engine import FlowEngine


__all__ = [
    "FlowEngine",
]
