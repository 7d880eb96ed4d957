"""Mini README: Registry mapping record kinds to their workflows.

Structure:
    * WorkflowRegistry - registers ``RecordWorkflow`` subclasses and builds
      instances bound to a record store and a ledger sync.

Workflows can be looked up by URL slug (``feeding``) or by record type tag
(``FeedingRecord``). The built-in workflows register themselves when
``dairyledger.records.workflows`` is imported.
"""

from __future__ import annotations

from typing import Dict, Iterable, Type

from ..finance.sync import LedgerSync
from ..logging_utils import get_logger
from .base import RecordWorkflow
from .store import RecordStore

LOGGER = get_logger(__name__)


class WorkflowRegistry:
    """Simple registry for mapping record identifiers to workflow classes."""

    def __init__(self) -> None:
        self._workflows: Dict[str, Type[RecordWorkflow]] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, workflow: Type[RecordWorkflow]) -> None:
        """Register a workflow class under its slug and record type."""

        identifier = workflow.slug.lower()
        LOGGER.debug("Registering workflow '%s' for %s", identifier, workflow.record_type)
        self._workflows[identifier] = workflow
        self._aliases[workflow.record_type.lower()] = identifier

    def available_workflows(self) -> Iterable[str]:
        """Return workflow slugs for display."""

        return sorted(self._workflows.keys())

    def resolve(self, identifier: str) -> Type[RecordWorkflow]:
        """Return the workflow class for a slug or record type tag."""

        key = identifier.lower()
        workflow_cls = self._workflows.get(self._aliases.get(key, key))
        if not workflow_cls:
            raise KeyError(f"Unknown record workflow '{identifier}'")
        return workflow_cls

    def create(self, identifier: str, *, records: RecordStore, sync: LedgerSync) -> RecordWorkflow:
        """Instantiate the workflow matching the identifier."""

        workflow_cls = self.resolve(identifier)
        LOGGER.debug("Creating workflow '%s'", workflow_cls.slug)
        return workflow_cls(records, sync)


REGISTRY = WorkflowRegistry()
