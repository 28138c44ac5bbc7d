import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    SALES = "sales"
    VIEWER = "viewer"


class ExpiryStatus(str, enum.Enum):
    VALID = "valid"
    WARNING = "warning"
    EXPIRED = "expired"


class ContractView(str, enum.Enum):
    ACTIVE = "active"
    ENDED = "ended"
    ARCHIVED = "archived"


class HistoryAction(str, enum.Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    ARCHIVED = "ARCHIVED"
    RESTORED = "RESTORED"
    DELETED = "DELETED"


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
