import os
from dataclasses import dataclass, fields
import tomlkit
from tomlkit.exceptions import TOMLKitError

# Settings for the 'gitserve' command, and where they come from.
# Utilizes https://github.com/sdispater/tomlkit to read the optional config file.
#
# Each setting is taken from the first place that has it:
# command line flag, environment variable, config file, built-in default.
#
# The expected toml format is:
# --------------------------
# [server]
# repo = "path/to/repo"
# listen = "127.0.0.1"
# port = 6504
# git = "/usr/bin/git"
# --------------------------

SERVER_TABLE = "server"

ENV_VARS = {
    "repo": "GITSERVE_REPO",
    "listen": "GITSERVE_LISTEN",
    "port": "GITSERVE_PORT",
    "git": "GITSERVE_GIT",
}

class ConfigError(Exception):
    pass

@dataclass
class ServeConfig:
    repo:str = "."
    listen:str = "0.0.0.0"
    port:int = 6504
    git:str = "git"

def load_config_file(config_path:str) -> dict:
    """Returns the [server] table of a toml config file as a plain dict."""
    try:
        with open(config_path, "r") as f:
            doc = tomlkit.load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config file '{config_path}': {e}") from e
    except TOMLKitError as e:
        raise ConfigError(f"Could not parse config file '{config_path}': {e}") from e
    if(SERVER_TABLE not in doc):
        return {}
    server = doc[SERVER_TABLE].unwrap()
    if(not isinstance(server, dict)):
        raise ConfigError(f"'{SERVER_TABLE}' in config file '{config_path}' must be a table.")
    known_keys = {f.name for f in fields(ServeConfig)}
    unknown_keys = set(server.keys()) - known_keys
    if(len(unknown_keys) > 0):
        raise ConfigError(f"Unknown keys in [{SERVER_TABLE}] of config file '{config_path}': {sorted(unknown_keys)}")
    return server

def load_env(environ:dict[str, str]|None=None) -> dict:
    if(environ is None):
        environ = os.environ
    return {key: environ[var] for key, var in ENV_VARS.items() if var in environ}

def resolve_config(
        flags:dict,
        config_path:str|None=None,
        environ:dict[str, str]|None=None,
        ) -> ServeConfig:
    settings = {}
    if(config_path is not None):
        settings.update(load_config_file(config_path))
    settings.update(load_env(environ))
    settings.update({k: v for k, v in flags.items() if v is not None})

    config = ServeConfig()
    for key, value in settings.items():
        setattr(config, key, value)
    try:
        config.port = int(config.port)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Port must be an integer, but was '{config.port}'.") from e
    if(config.port < 0 or config.port > 65535):
        raise ConfigError(f"Port must be between 0 and 65535, but was {config.port}.")
    config.repo = str(config.repo)
    config.listen = str(config.listen)
    config.git = str(config.git)
    return config
