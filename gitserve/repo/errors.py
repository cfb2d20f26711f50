
class GitServeError(Exception):
    pass

class BackendError(GitServeError):
    """The object backend could not answer, e.g. the git command failed or printed something unexpected."""
    returncode:int|None

    def __init__(self, message:str, returncode:int|None=None):
        super().__init__(message)
        self.returncode = returncode

class RefNotFoundError(GitServeError):
    pass

class WalkError(GitServeError):
    pass

class FileNotInTreeError(WalkError):
    def __init__(self, message:str="file not found in tree"):
        super().__init__(message)

class PathConflictError(WalkError):
    #the path continues below an entry that is a blob
    def __init__(self, message:str="this is a directory, not an object"):
        super().__init__(message)

class UnsupportedObjectTypeError(WalkError):
    def __init__(self, message:str="unsupported object type"):
        super().__init__(message)
