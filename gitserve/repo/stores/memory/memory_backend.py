import hashlib
import string
from typing import NamedTuple
from gitserve.repo.object_model import *
from gitserve.repo.errors import BackendError
from gitserve.repo.backend import ObjectBackend

# In-memory object backend. Used to build deterministic repositories in tests, or to serve
# objects that never touched a disk.

_MIN_ABBREV_LEN = 4
# the namespaces tried, in order, when a name is not a full reference
_REF_LOOKUP_PREFIXES = ("", "tags/", "heads/", "remotes/")

_DEFAULT_PERMISSIONS = {
    ObjectKind.BLOB: 100644,
    ObjectKind.TREE: 40000,
    ObjectKind.COMMIT: 160000,
}

MemoryObject = NamedTuple("MemoryObject",
    [('kind', ObjectKind),
     ('payload', bytes | Tree | ObjectId)]) #bytes for blobs, entries for trees, target id for commits and tags

def tree_entry(name:str, kind:ObjectKind, object_id:ObjectId, permissions:int|None=None) -> TreeEntry:
    if(permissions is None):
        permissions = _DEFAULT_PERMISSIONS.get(kind, 0)
    return TreeEntry(permissions, kind, object_id, name)

def get_object_id(kind:ObjectKind, data:bytes) -> ObjectId:
    header = f"{kind.value} {len(data)}\0".encode()
    return hashlib.sha1(header + data).hexdigest()

class MemoryBackend(ObjectBackend):
    #no locking needed here, because all the dict operations used here are atomic
    _objects:dict[ObjectId, MemoryObject]
    _refs:dict[Ref, ObjectId]

    def __init__(self):
        super().__init__()
        self._objects = {}
        self._refs = {}

    #=========================
    # Builders
    #=========================
    def add_blob(self, data:bytes|str, object_id:ObjectId|None=None) -> ObjectId:
        if(isinstance(data, str)):
            data = data.encode('utf-8')
        return self._add(ObjectKind.BLOB, data, data, object_id)

    def add_tree(self, entries:list[TreeEntry], object_id:ObjectId|None=None) -> ObjectId:
        names = [entry.name for entry in entries]
        if(len(names) != len(set(names))):
            raise ValueError(f"Tree entry names must be unique, got {names}")
        for entry in entries:
            if("/" in entry.name or entry.name == ""):
                raise ValueError(f"Invalid tree entry name '{entry.name}'")
        data = b"".join(f"{entry.permissions} {entry.kind.value} {entry.object_id}\t{entry.name}\0".encode('utf-8', errors='surrogateescape') for entry in entries)
        return self._add(ObjectKind.TREE, list(entries), data, object_id)

    def add_commit(self, tree_id:ObjectId, message:str="", object_id:ObjectId|None=None) -> ObjectId:
        data = f"tree {tree_id}\n\n{message}".encode()
        return self._add(ObjectKind.COMMIT, tree_id, data, object_id)

    def add_tag(self, target_id:ObjectId, name:str="", object_id:ObjectId|None=None) -> ObjectId:
        data = f"object {target_id}\ntag {name}\n".encode()
        return self._add(ObjectKind.TAG, target_id, data, object_id)

    def set_ref(self, ref:Ref, object_id:ObjectId) -> None:
        if(ref.startswith("/") or ref.endswith("/")):
            raise ValueError(f"Reference must not start or end with a slash, but was '{ref}'.")
        if(object_id not in self._objects):
            raise ValueError(f"Reference '{ref}' points to unknown object '{object_id}'.")
        self._refs[ref] = object_id

    def _add(self, kind:ObjectKind, payload, data:bytes, object_id:ObjectId|None) -> ObjectId:
        if(object_id is None):
            object_id = get_object_id(kind, data)
        self._objects[object_id] = MemoryObject(kind, payload)
        return object_id

    #=========================
    # ObjectBackend
    #=========================
    async def list_refs(self) -> list[Ref]:
        return list(self._refs.keys())

    async def list_tree(self, object_id:ObjectId) -> Tree:
        resolved_id = self.resolve(object_id)
        obj = self._peel_to_tree(resolved_id, object_id)
        return list(obj.payload)

    async def read_blob(self, object_id:ObjectId) -> bytes:
        resolved_id = self.resolve(object_id)
        obj = self._objects[resolved_id]
        if(obj.kind != ObjectKind.BLOB):
            raise BackendError(f"fatal: git cat-file {object_id}: bad file", 128)
        return obj.payload

    async def probe_repo(self) -> None:
        pass

    #=========================
    # Name resolution
    #=========================
    def resolve(self, name:str) -> ObjectId:
        """Resolves a full id, a reference (with or without its namespace) or a unique id prefix."""
        if(name in self._objects):
            return name
        for prefix in _REF_LOOKUP_PREFIXES:
            if(prefix + name in self._refs):
                return self._refs[prefix + name]
        if(len(name) >= _MIN_ABBREV_LEN and all(c in string.hexdigits for c in name)):
            matches = [object_id for object_id in self._objects if object_id.startswith(name.lower())]
            if(len(matches) == 1):
                return matches[0]
            elif(len(matches) > 1):
                raise BackendError(f"error: short object ID {name} is ambiguous\nfatal: Not a valid object name {name}", 128)
        raise BackendError(f"fatal: Not a valid object name {name}", 128)

    def _peel_to_tree(self, object_id:ObjectId, name:str) -> MemoryObject:
        obj = self._objects[object_id]
        seen = {object_id}
        #tags can point to tags
        while(obj.kind in (ObjectKind.COMMIT, ObjectKind.TAG)):
            if(obj.payload not in self._objects or obj.payload in seen):
                raise BackendError(f"fatal: not a tree object: {name}", 128)
            seen.add(obj.payload)
            obj = self._objects[obj.payload]
        if(obj.kind != ObjectKind.TREE):
            raise BackendError(f"fatal: not a tree object: {name}", 128)
        return obj
