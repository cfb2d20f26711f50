from . memory_backend import MemoryBackend, tree_entry
