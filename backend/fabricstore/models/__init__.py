from .auth import User, SessionToken
from .inventory import Catalog, Roll
from .audit import AuditLogEntry

__all__ = [
    'User', 'SessionToken',
    'Catalog', 'Roll',
    'AuditLogEntry',
]
