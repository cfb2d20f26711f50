import asyncio
import contextlib
import logging
import re
from gitserve.repo.object_model import *
from gitserve.repo.errors import BackendError
from gitserve.repo.backend import ObjectBackend

# Object backend that shells out to the git command line tool.
#
# Every call starts a short-lived git process in the repository directory (passed as the cwd of the
# process, the gateway never changes its own working directory). If the awaiting coroutine gets
# cancelled, e.g. because the client went away, the process is killed and reaped right away.

logger = logging.getLogger(__name__)

_REF_LINE_RE = re.compile(r"^([0-9a-f]{40}|[0-9a-f]{64})\s+(.+)$")
# <mode> SP <type> SP <object> TAB <file>, names may contain anything but NUL when listed with -z
_TREE_RECORD_RE = re.compile(r"^([0-9]+) ([a-z]+) ([0-9a-f]+)\t(.+)$", re.DOTALL)
_REFS_PREFIX = "refs/"

class GitBackend(ObjectBackend):
    def __init__(self, repo_dir:str=".", git_executable:str="git"):
        super().__init__()
        self.repo_dir = repo_dir
        self.git_executable = git_executable

    async def list_refs(self) -> list[Ref]:
        returncode, stdout, stderr = await self._run_git("show-ref")
        #show-ref exits with 1 and prints nothing if there are no refs at all
        if(returncode == 1 and len(stdout.strip()) == 0 and len(stderr.strip()) == 0):
            return []
        self._check_returncode("show-ref", returncode, stderr)
        return parse_show_ref(stdout.decode('utf-8', errors='surrogateescape'))

    async def list_tree(self, object_id:ObjectId) -> Tree:
        self._check_object_id(object_id)
        returncode, stdout, stderr = await self._run_git("ls-tree", "-z", object_id)
        self._check_returncode("ls-tree", returncode, stderr)
        return parse_ls_tree(stdout.decode('utf-8', errors='surrogateescape'))

    async def read_blob(self, object_id:ObjectId) -> bytes:
        self._check_object_id(object_id)
        returncode, stdout, stderr = await self._run_git("cat-file", "blob", object_id)
        self._check_returncode("cat-file", returncode, stderr)
        return stdout

    async def probe_repo(self) -> None:
        returncode, stdout, stderr = await self._run_git("rev-parse", "--git-dir")
        self._check_returncode("rev-parse", returncode, stderr)
        logger.debug(f"git dir of '{self.repo_dir}': {stdout.decode('utf-8', errors='replace').strip()}")

    async def _run_git(self, *args:str) -> tuple[int, bytes, bytes]:
        logger.debug(f"running git {' '.join(args)} in '{self.repo_dir}'")
        try:
            process = await asyncio.create_subprocess_exec(
                self.git_executable, *args,
                cwd=self.repo_dir,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE)
        except OSError as e:
            raise BackendError(f"could not run '{self.git_executable} {args[0]}' in '{self.repo_dir}': {e}") from e
        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise
        return process.returncode, stdout, stderr

    def _check_returncode(self, command:str, returncode:int, stderr:bytes) -> None:
        if(returncode != 0):
            message = stderr.decode('utf-8', errors='replace').strip()
            raise BackendError(f"git {command} failed with exit status {returncode}: {message}", returncode)

    def _check_object_id(self, object_id:ObjectId) -> None:
        #anything starting with a dash would be taken as an option by git
        if(object_id == "" or object_id.startswith("-")):
            raise BackendError(f"Not a valid object name '{object_id}'")

def parse_show_ref(output:str) -> list[Ref]:
    refs = []
    for line in output.splitlines():
        if(line == ""):
            continue
        match = _REF_LINE_RE.match(line)
        if(match is None):
            raise BackendError(f"Confused by your refs, expected '<hash> <refname>', got: {line!r}")
        ref = match.group(2).strip()
        if(ref.startswith(_REFS_PREFIX)):
            ref = ref[len(_REFS_PREFIX):]
        refs.append(ref)
    return refs

def parse_ls_tree(output:str) -> Tree:
    entries = []
    for record in output.split("\0"):
        if(record == ""):
            continue
        match = _TREE_RECORD_RE.match(record)
        if(match is None):
            raise BackendError(f"Unexpected parse of `git ls-tree` output: {record!r}")
        permissions_str, kind_str, object_id, name = match.groups()
        permissions = int(permissions_str, 10)
        if(permissions > MAX_PERMISSIONS):
            raise BackendError(f"Could not parse permissions for file {name!r}, got {permissions_str}")
        try:
            kind = ObjectKind(kind_str)
        except ValueError as e:
            raise BackendError(f"Unknown object type '{kind_str}' for file {name!r}") from e
        entries.append(TreeEntry(permissions, kind, object_id, name))
    return entries
