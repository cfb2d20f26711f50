import asyncio
import logging
import os
import click
from dataclasses import dataclass
from gitserve.repo import BackendError
from gitserve.repo.stores.git import GitBackend
from gitserve.web.web_server import WebServer
from gitserve.cli.serve_config import ServeConfig, ConfigError, resolve_config

# Command line entry point that serves a git repository over HTTP.
# It utilizes the 'click' library.

EXIT_BAD_REPO_DIR = 2
EXIT_NOT_A_REPO = 3

@dataclass
class ServeContext:
    verbose:bool
    config:ServeConfig

    def init_backend(self) -> GitBackend:
        return GitBackend(os.path.abspath(self.config.repo), self.config.git)

@click.command()
@click.pass_context
@click.option("--repo", default=None, help="Git repository to serve.  [default: .]")
@click.option("--listen", default=None, help="What address to listen to.  [default: 0.0.0.0]")
@click.option("--port", default=None, type=int, help="Port to listen on.  [default: 6504]")
@click.option("--git", "git_executable", default=None, help="The git executable to run.  [default: git]")
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False), help="TOML file with a [server] table.")
@click.option("--verbose", "-v", is_flag=True, help="Will print verbose messages.")
def cli(ctx:click.Context, repo:str|None, listen:str|None, port:int|None, git_executable:str|None, config_path:str|None, verbose:bool):
    """Serves the blobs and trees of a git repository under /blob/<ref-or-hash>/<path>."""
    #print logs to console
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        config = resolve_config(
            {"repo": repo, "listen": listen, "port": port, "git": git_executable},
            config_path)
    except ConfigError as e:
        raise click.UsageError(str(e), ctx)
    serve_ctx = ServeContext(verbose=verbose, config=config)
    ctx.obj = serve_ctx

    if(not os.path.isdir(config.repo)):
        click.echo(f"Repository directory '{config.repo}' (absolute: '{os.path.abspath(config.repo)}') does not exist.", err=True)
        ctx.exit(EXIT_BAD_REPO_DIR)

    backend = serve_ctx.init_backend()
    try:
        asyncio.run(backend.probe_repo())
    except BackendError as e:
        click.echo(f"Git didn't like '{config.repo}', got: {e}", err=True)
        ctx.exit(EXIT_NOT_A_REPO)

    logger.info(f"Serving '{backend.repo_dir}' on {config.listen}:{config.port}")
    web_server = WebServer(backend)
    asyncio.run(web_server.run(host=config.listen, port=config.port))

if __name__ == '__main__':
    cli(None)
