from . object_model import *
from . errors import (GitServeError, BackendError, RefNotFoundError, WalkError, FileNotInTreeError,
                      PathConflictError, UnsupportedObjectTypeError)
from . backend import ObjectBackend
from . tree_helpers import split_path, strip_leading_slash, find_entry
from . references import count_slashes, ref_less, sort_refs, pick_longest_ref
from . listing import render_listing
from . tree_walker import TreeWalker
