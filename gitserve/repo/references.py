import functools
import logging
from typing import Iterable
from gitserve.repo.object_model import *
from gitserve.repo.errors import RefNotFoundError
from gitserve.repo.tree_helpers import strip_leading_slash

# Ordering and resolution of human-readable references (branches, tags, remotes) found in a URL.
#
# References may contain slashes, so it is not possible to tell from the URL alone where the
# reference ends and the path inside the tree begins. Instead, all references are sorted from the
# most to the least specific, and the first one that prefixes the URL wins.

logger = logging.getLogger(__name__)

# namespaces that may be left out of a URL, in the order they are tried
IMPLICIT_NAMESPACES = ("heads/", "tags/")

def count_slashes(ref:Ref) -> int:
    return ref.count("/")

def ref_less(a:Ref, b:Ref) -> bool:
    """True if 'a' should be tried before 'b': more slashes first, then the longer one."""
    a_slashes = count_slashes(a)
    b_slashes = count_slashes(b)
    if(a_slashes != b_slashes):
        return a_slashes > b_slashes
    return len(a) > len(b)

def _ref_compare(a:Ref, b:Ref) -> int:
    if(ref_less(a, b)):
        return -1
    if(ref_less(b, a)):
        return 1
    return 0

def sort_refs(refs:Iterable[Ref]) -> list[Ref]:
    #sorted() is stable, so refs that tie keep their incoming order
    return sorted(refs, key=functools.cmp_to_key(_ref_compare))

def pick_longest_ref(url_suffix:str, refs:list[Ref]) -> tuple[Ref, str]:
    """Finds the reference that the url suffix starts with, returns (ref, residual path).

    The refs are expected to be sorted with sort_refs. References are first matched literally against
    the suffix, and only if none matches, with 'heads/' and then 'tags/' put in front of the suffix,
    so that '/blob/master/Makefile' finds 'heads/master'."""
    for ref in refs:
        if(url_suffix.startswith(ref)):
            residual = strip_leading_slash(url_suffix[len(ref):])
            logger.debug(f"ref '{ref}' matched '{url_suffix}' directly, residual '{residual}'")
            return ref, residual
    #only fall back to the implicit namespaces after all literal matches have been ruled out
    for ref in refs:
        for namespace in IMPLICIT_NAMESPACES:
            if(len(ref) <= len(namespace)):
                continue
            if((namespace + url_suffix).startswith(ref)):
                residual = strip_leading_slash(url_suffix[len(ref)-len(namespace):])
                logger.debug(f"ref '{ref}' matched '{url_suffix}' in namespace '{namespace}', residual '{residual}'")
                return ref, residual
    raise RefNotFoundError(f"Could not find '{url_suffix}' in {refs}")
