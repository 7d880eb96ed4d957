"""Mini README: Finance ledger and record-to-ledger synchronisation.

The ``ledger`` module stores income and expense entries behind the
``LedgerStore`` boundary. The ``sync`` module keeps one derived entry per
cost-bearing herd record, creating, updating or retracting it as the record
changes.
"""

from .ledger import (
    InMemoryLedgerStore,
    LedgerEntry,
    LedgerEntryDraft,
    LedgerStore,
    TransactionType,
    parse_amount,
    parse_date,
)
from .sync import (
    BREEDING_RECORD,
    FEEDING_RECORD,
    PRODUCTION_RECORD,
    CostBearingRecord,
    LedgerSync,
    LinkPolicy,
    SyncOutcome,
    SyncResult,
    link_key,
)

__all__ = [
    "BREEDING_RECORD",
    "CostBearingRecord",
    "FEEDING_RECORD",
    "InMemoryLedgerStore",
    "LedgerEntry",
    "LedgerEntryDraft",
    "LedgerStore",
    "LedgerSync",
    "LinkPolicy",
    "PRODUCTION_RECORD",
    "SyncOutcome",
    "SyncResult",
    "TransactionType",
    "link_key",
    "parse_amount",
    "parse_date",
]
