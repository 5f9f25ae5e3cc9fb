"""
Persistence Layer - Checkpointing flow progress.
"""

from workshop_flow.persistence.bridge import PersistenceBridge, SaveStatus

__all__ = [
    "PersistenceBridge",
    "SaveStatus",
]
