"""Transaction-related data models and enums."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Set


class TransactionState(Enum):
    """Enumeration of possible transaction states."""

    ACTIVE = "active"
    PREPARING = "preparing"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class Transaction:
    """A unit of work: staged writes plus the row locks it holds."""

    id: str
    state: TransactionState
    operations: List[Dict[str, Any]]
    timestamp: float
    held_locks: Set[Any] = field(default_factory=set)
    failure: Optional[Exception] = None
