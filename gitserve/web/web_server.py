import asyncio
import contextlib
import logging
from urllib.parse import unquote_to_bytes
from typing import Awaitable, TypeVar
import uvicorn
from starlette.exceptions import HTTPException
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route
from gitserve.repo import *

# HTTP gateway that serves the blobs and trees of a repository.
# It utilizes the Starlette framework (https://www.starlette.io/) and is served by uvicorn.
#
# There is a single route, '/blob/<ref-or-hash>/<path>':
# - the first part of the url is matched against the references of the repository (which can contain
#   slashes themselves), and if no reference matches, the first segment is taken as an object hash
# - the rest of the url is walked through the trees of that object
# - blobs are served as raw bytes, trees as an HTML listing
#
# Everything the client can get wrong is a 404. Only failing to list the references is a 500.

logger = logging.getLogger(__name__)

T = TypeVar("T")

class ClientDisconnected(Exception):
    pass

async def run_until_disconnected(request:Request, work:Awaitable[T], poll_interval:float=0.1) -> T:
    """Awaits work, but cancels it as soon as the client of the request has gone away."""
    work_task = asyncio.ensure_future(work)
    try:
        while True:
            done, _pending = await asyncio.wait([work_task], timeout=poll_interval)
            if(len(done) > 0):
                return work_task.result()
            if(await request.is_disconnected()):
                logger.info(f"Client disconnected, abandoning {request.url.path}")
                raise ClientDisconnected()
    finally:
        if(not work_task.done()):
            work_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await work_task

class WebServer:
    BLOB_PREFIX = "/blob/"
    __BLOB_PATH_PARAM = "blob_path"
    __HTML_MEDIA_TYPE = "text/html; charset=utf-8"
    #every method reaches the handler, so that anything but GET and HEAD can be answered with an empty 404
    __ROUTE_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

    def __init__(self, backend:ObjectBackend, disconnect_poll_interval:float=0.1):
        self.backend = backend
        self.walker = TreeWalker(backend)
        self.disconnect_poll_interval = disconnect_poll_interval

    def app(self) -> Starlette:
        routes = [
            Route(f"{self.BLOB_PREFIX}{{{self.__BLOB_PATH_PARAM}:path}}", self.blob_get, methods=self.__ROUTE_METHODS),
        ]
        return Starlette(routes=routes)

    async def run(self, host:str="0.0.0.0", port:int=6504):
        config = uvicorn.Config(app=self.app(), host=host, port=port, loop="asyncio", log_level="info")
        server = uvicorn.Server(config)
        await server.serve()

    #=========================
    # Route handlers
    #=========================
    async def blob_get(self, request:Request):
        if(request.method not in ("GET", "HEAD")):
            return Response(status_code=404)

        try:
            refs = await self.backend.list_refs()
        except BackendError as e:
            logger.error(f"Could not list references: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        refs = sort_refs(refs)

        path = self.__normalize_path(self.__request_path(request))
        path_parts = path.split("/")
        if(len(path_parts) < 2 or path_parts[0] != "" or path_parts[1] != "blob"):
            return Response(status_code=404)

        suffix = path[len(self.BLOB_PREFIX):]
        try:
            ref, residual = pick_longest_ref(suffix, refs)
        except RefNotFoundError as e:
            #if it isn't a ref, assume it's a hash literal
            logger.debug(f"Assuming a hash literal: {e}")
            if(len(path_parts) < 3):
                return Response(status_code=404)
            ref = path_parts[2]
            residual = "/".join(path_parts[3:])
        logger.debug(f"ref '{ref}', path '{residual}'")

        try:
            result = await run_until_disconnected(
                request,
                self.walker.walk_object(ref, path, residual),
                self.disconnect_poll_interval)
        except (WalkError, BackendError) as e:
            logger.info(f"Could not serve {path}: {e}")
            raise HTTPException(status_code=404, detail=str(e))
        except ClientDisconnected:
            return Response(status_code=404)

        if(result.kind == ObjectKind.TREE):
            return Response(result.content, media_type=self.__HTML_MEDIA_TYPE)
        return Response(result.content)

    def __request_path(self, request:Request) -> str:
        #file names are arbitrary bytes, so decode the raw path ourselves instead of using the utf-8 decoded one
        raw_path = request.scope.get("raw_path")
        if(raw_path is None):
            return request.scope["path"]
        return unquote_to_bytes(raw_path).decode('utf-8', errors='surrogateescape')

    def __normalize_path(self, path:str) -> str:
        if(len(path) > 1 and path.endswith("/")):
            return path[:-1]
        return path
