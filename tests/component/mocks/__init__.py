"""
Component Test Mocks

Shared mock implementations for component testing.
These mocks replace real I/O dependencies (database, backend HTTP).
"""

from .db_mock import MockPostgresClient
from .http_mock import MockBackend
from .gkey_mock import FakeClock, MockGKeyRepository

__all__ = [
    'MockPostgresClient',
    'MockBackend',
    'FakeClock',
    'MockGKeyRepository',
]
