"""Core application components."""

from core.logger import setup_logger, get_logger
from core.constants import (
    SyncDefaults,
    Endpoints,
    CacheDefaults,
    DatabaseDefaults,
    LotteryDefaults,
    SubscriptionState,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    DatabaseError,
    PersistenceFailure,
    ServiceError,
    SyncError,
    ConfigurationAbsent,
    TransportFailure,
    RemoteRejected,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'SyncDefaults',
    'Endpoints',
    'CacheDefaults',
    'DatabaseDefaults',
    'LotteryDefaults',
    'SubscriptionState',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'DatabaseError',
    'PersistenceFailure',
    'ServiceError',
    'SyncError',
    'ConfigurationAbsent',
    'TransportFailure',
    'RemoteRejected',
]
