"""Persistence core: codecs, keys, transactional writes and repositories.

Only dependency-free building blocks are re-exported here; import the
DynamoDB repository and transaction manager from their modules.
"""

from infrastructure.persistence.codec import EntityCodec
from infrastructure.persistence.errors import (
    ConflictError,
    CorruptDataError,
    NotFoundError,
    OperationInterruptedError,
    OversizeError,
    PersistenceError,
    TransientStorageFailure,
    UnknownStorageError,
)
from infrastructure.persistence.repository import Repository

__all__ = [
    "EntityCodec",
    "Repository",
    "PersistenceError",
    "ConflictError",
    "NotFoundError",
    "OversizeError",
    "TransientStorageFailure",
    "CorruptDataError",
    "OperationInterruptedError",
    "UnknownStorageError",
]
