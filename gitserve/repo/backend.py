from abc import ABC, abstractmethod
from gitserve.repo.object_model import *

class ObjectBackend(ABC):
    """Interface for reading objects and references from a version-control repository.

    Implementations must be safe to call concurrently from many requests. All failures are
    reported by raising a BackendError."""
    @abstractmethod
    async def list_refs(self) -> list[Ref]:
        """Returns all reference names, stripped of their 'refs/' prefix."""
        pass

    @abstractmethod
    async def list_tree(self, object_id:ObjectId) -> Tree:
        """Returns the entries of the tree that object_id names (commits and tags are peeled to their tree)."""
        pass

    @abstractmethod
    async def read_blob(self, object_id:ObjectId) -> bytes:
        pass

    @abstractmethod
    async def probe_repo(self) -> None:
        """Checks that the backend points to a valid repository, raises a BackendError if not."""
        pass
