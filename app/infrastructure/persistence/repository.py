"""Backend-agnostic repository contract."""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")
ID = TypeVar("ID")


class Repository(ABC, Generic[T, ID]):
    """Capability set shared by every repository backend.

    Invariant: ``save`` followed by ``find_by_id`` with the saved id returns
    an entity with that id (read-your-writes within one backend instance).
    """

    @abstractmethod
    def save(self, entity: T) -> T:
        """Insert or fully replace ``entity``; assigns an id when absent."""

    @abstractmethod
    def find_by_id(self, entity_id: ID) -> Optional[T]:
        pass

    @abstractmethod
    def find_all(self) -> List[T]:
        """Return every entity; paged results are drained before returning."""

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Remove ``entity`` unconditionally; deleting a missing entity is a no-op."""

    @abstractmethod
    def count(self) -> int:
        pass

    def exists(self, entity_id: ID) -> bool:
        return self.find_by_id(entity_id) is not None
