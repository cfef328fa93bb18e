"""Audit logging decorator for repositories.

Wraps a repository and emits one ``repository_audit`` event per write
operation. Reads are forwarded to the wrapped repository unaudited.
Entity-specific repositories subclass ``AuditedRepository`` and add their
own operations the same way.

Usage:
    repository = AuditedApiKeyRepository(DynamoDBApiKeyRepository(...))
    repository.revoke_with_guard(api_key, "admin@example.com")
    # -> repository_audit operation=revoke_with_guard outcome=success ...
"""

import time
from typing import Any, Callable, List, Optional, TypeVar

import structlog

from infrastructure.persistence.repository import ID, Repository, T

logger = structlog.get_logger()

R = TypeVar("R")

ACTOR_ARGUMENTS = ("revoked_by", "actor", "actor_email")


def _describe_target(args: tuple) -> Optional[str]:
    if not args:
        return None
    target = args[0]
    if isinstance(target, (list, tuple)):
        return ",".join(str(getattr(entity, "id", "")) for entity in target)
    entity_id = getattr(target, "id", None)
    return str(entity_id) if entity_id is not None else None


def _resolve_actor(args: tuple, kwargs: dict) -> Optional[str]:
    for name in ACTOR_ARGUMENTS:
        if kwargs.get(name):
            return kwargs[name]
    # revoke_with_guard(key, actor) / rotate_atomically(old, new, actor)
    if args and isinstance(args[-1], str):
        return args[-1]
    return structlog.contextvars.get_contextvars().get("actor_email")


class AuditedRepository(Repository[T, ID]):
    """Repository decorator that audits ``save`` and ``delete``.

    Args:
        delegate: Repository to wrap
    """

    def __init__(self, delegate: Repository[T, ID]) -> None:
        self._delegate = delegate
        self._repository_name = type(delegate).__name__

    @property
    def delegate(self) -> Repository[T, ID]:
        return self._delegate

    def save(self, entity: T) -> T:
        return self._audit("save", self._delegate.save, entity)

    def delete(self, entity: T) -> None:
        self._audit("delete", self._delegate.delete, entity)

    def find_by_id(self, entity_id: ID) -> Optional[T]:
        return self._delegate.find_by_id(entity_id)

    def find_all(self) -> List[T]:
        return self._delegate.find_all()

    def count(self) -> int:
        return self._delegate.count()

    def exists(self, entity_id: ID) -> bool:
        return self._delegate.exists(entity_id)

    def _audit(
        self, operation: str, method: Callable[..., R], *args: Any, **kwargs: Any
    ) -> R:
        """Call ``method`` and log one audit event for the outcome."""
        started = time.monotonic()
        event = {
            "operation": operation,
            "repository": self._repository_name,
            "actor": _resolve_actor(args, kwargs),
        }
        try:
            result = method(*args, **kwargs)
        except Exception as exc:
            logger.warning(
                "repository_audit",
                **event,
                entity_id=_describe_target(args),
                outcome="failure",
                error_type=type(exc).__name__,
                duration_ms=round((time.monotonic() - started) * 1000, 2),
            )
            raise
        logger.info(
            "repository_audit",
            **event,
            entity_id=_describe_target(args) or _describe_target((result,)),
            outcome="success",
            error_type=None,
            duration_ms=round((time.monotonic() - started) * 1000, 2),
        )
        return result
