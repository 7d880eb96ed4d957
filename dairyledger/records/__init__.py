"""Mini README: Herd record subsystem package initialiser.

Re-exports the record models, the store, the workflow base class and the
registry. The package is divided into ``models`` for record dataclasses,
``store`` for persistence, ``base`` and ``registry`` for the workflow
plumbing, and ``workflows`` for the concrete record types.
"""

from .base import RecordWorkflow, SaveResult
from .models import BreedingRecord, DomainRecord, FeedingRecord, ProductionRecord
from .registry import REGISTRY, WorkflowRegistry
from .store import RecordStore
from .workflows import BreedingWorkflow, FeedingWorkflow, ProductionWorkflow

__all__ = [
    "BreedingRecord",
    "BreedingWorkflow",
    "DomainRecord",
    "FeedingRecord",
    "FeedingWorkflow",
    "ProductionRecord",
    "ProductionWorkflow",
    "REGISTRY",
    "RecordStore",
    "RecordWorkflow",
    "SaveResult",
    "WorkflowRegistry",
]
