from policydesk.db.models.contract import Contract
from policydesk.db.models.history import HistoryEntry
from policydesk.db.models.task import Task
from policydesk.db.models.user import User

__all__ = [
    "Contract",
    "HistoryEntry",
    "Task",
    "User",
]
