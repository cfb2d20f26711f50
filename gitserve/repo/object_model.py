from enum import Enum
from typing import NamedTuple

# Type aliases and structures that define the object model as seen through an object backend.

ObjectId = str # full hex hash, abbreviated prefix, or any name the backend can resolve (e.g. 'tags/1.0')
Ref = str # reference name without the 'refs/' prefix, e.g. 'heads/master', may contain slashes

class ObjectKind(str, Enum):
    BLOB = "blob"
    TREE = "tree"
    COMMIT = "commit"
    TAG = "tag"

    def __str__(self) -> str:
        return self.value

MAX_PERMISSIONS = 2**32 - 1

TreeEntry = NamedTuple("TreeEntry",
    [('permissions', int), #decimal digits of the mode as printed by the backend, fits in 32 bits
     ('kind', ObjectKind),
     ('object_id', ObjectId),
     ('name', str)]) #last path component, never contains a slash

Tree = list[TreeEntry]

WalkResult = NamedTuple("WalkResult",
    [('kind', ObjectKind), #TREE for a rendered listing, BLOB for raw content
     ('content', bytes)])
