from . git_backend import GitBackend
