from gitserve.repo.object_model import *

# Low-level helpers for working with slash-delimited paths inside trees.

def split_path(path:str) -> tuple[str, str]:
    """Splits off the first segment of a path, returns (first, rest).

    A single leading slash is ignored, and a trailing slash leaves an empty rest:
    'foo/bar/baz' -> ('foo', 'bar/baz'), '/foo' -> ('foo', ''), 'foo/' -> ('foo', '')."""
    if(path.startswith("/")):
        path = path[1:]
    if(path == ""):
        return "", ""
    i = path.find("/")
    if(i == -1):
        return path, ""
    return path[:i], path[i+1:]

def strip_leading_slash(path:str) -> str:
    if(path.startswith("/")):
        return path[1:]
    return path

def find_entry(tree:Tree, name:str) -> TreeEntry | None:
    #exact match, no case folding
    for entry in tree:
        if(entry.name == name):
            return entry
    return None
