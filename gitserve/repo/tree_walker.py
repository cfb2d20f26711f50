import logging
from gitserve.repo.object_model import *
from gitserve.repo.errors import FileNotInTreeError, PathConflictError, UnsupportedObjectTypeError
from gitserve.repo.backend import ObjectBackend
from gitserve.repo.listing import render_listing
from gitserve.repo.tree_helpers import split_path, find_entry

logger = logging.getLogger(__name__)

class TreeWalker:
    """Descends from a root object through a path, one tree at a time, to a blob or a tree.

    A walk ends either with the raw bytes of a blob or with a rendered listing of a tree.
    Commits and tags can only be the root of a walk (the backend peels them to their tree)."""

    def __init__(self, backend:ObjectBackend):
        self.backend = backend

    async def walk(self, object_id:ObjectId, url_prefix:str, path:str) -> bytes:
        result = await self.walk_object(object_id, url_prefix, path)
        return result.content

    async def walk_object(self, object_id:ObjectId, url_prefix:str, path:str) -> WalkResult:
        #an unknown or non-tree root surfaces here as a BackendError
        tree = await self.backend.list_tree(object_id)
        logger.debug(f"walking {len(tree)} entries @ {object_id}, path '{path}'")
        if(path == ""):
            return WalkResult(ObjectKind.TREE, render_listing(tree, url_prefix))

        name, rest = split_path(path)
        entry = find_entry(tree, name)
        if(entry is None):
            logger.debug(f"'{name}' not found @ {object_id}, rest '{rest}'")
            raise FileNotInTreeError()

        if(rest == ""):
            if(entry.kind == ObjectKind.TREE):
                tree = await self.backend.list_tree(entry.object_id)
                return WalkResult(ObjectKind.TREE, render_listing(tree, url_prefix))
            elif(entry.kind == ObjectKind.BLOB):
                return WalkResult(ObjectKind.BLOB, await self.backend.read_blob(entry.object_id))
            else:
                raise UnsupportedObjectTypeError(f"unsupported object type: {entry.kind} ({entry.name})")
        else:
            if(entry.kind == ObjectKind.TREE):
                return await self.walk_object(entry.object_id, url_prefix, rest)
            elif(entry.kind == ObjectKind.BLOB):
                raise PathConflictError(f"this is a directory, not an object: {entry.name} ({entry.object_id})")
            else:
                raise UnsupportedObjectTypeError(f"unsupported object type: {entry.kind} ({entry.name})")
