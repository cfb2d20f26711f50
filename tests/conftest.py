import os
import shutil
import subprocess
import pytest

# Shared fixtures: a scratch git repository built with the git command line tool.

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

GIT_ENV = {
    "GIT_AUTHOR_NAME": "Test User",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test User",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
}

def run_git(repo_dir, *args) -> str:
    env = dict(os.environ)
    env.update(GIT_ENV)
    env["GIT_CONFIG_GLOBAL"] = os.devnull
    result = subprocess.run(["git", *args], cwd=repo_dir, env=env, check=True, capture_output=True)
    return result.stdout.decode().strip()

def write_file(repo_dir, rel_path:str, content:str|bytes):
    file_path = os.path.join(repo_dir, rel_path)
    os.makedirs(os.path.dirname(file_path), exist_ok=True)
    mode = "wb" if isinstance(content, bytes) else "w"
    with open(file_path, mode) as f:
        f.write(content)

@pytest.fixture
def isolated_git(tmp_path, monkeypatch):
    #keep git from finding a repository above the temp dir, or any user config
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    return tmp_path

@pytest.fixture
def empty_git_repo(isolated_git):
    repo_dir = isolated_git / "empty"
    repo_dir.mkdir()
    run_git(repo_dir, "init", "-q")
    return str(repo_dir)

@pytest.fixture
def git_repo(isolated_git):
    """A repository with two commits on 'master', and a couple of tags (one with slashes in its name)."""
    repo_dir = isolated_git / "repo"
    repo_dir.mkdir()
    run_git(repo_dir, "init", "-q")
    run_git(repo_dir, "symbolic-ref", "HEAD", "refs/heads/master")

    write_file(repo_dir, "gitserve.go", "package main\n")
    run_git(repo_dir, "add", "-A")
    run_git(repo_dir, "commit", "-q", "-m", "first")
    run_git(repo_dir, "tag", "0.0.0.0.1")

    write_file(repo_dir, "gitserve.go", "package main\n\nfunc main() {}\n")
    write_file(repo_dir, "gitserve_test.go", "package main\n")
    write_file(repo_dir, "a/b/c/testfile", "test\n")
    write_file(repo_dir, "with space.txt", "spaced\n")
    run_git(repo_dir, "add", "-A")
    run_git(repo_dir, "commit", "-q", "-m", "second")
    run_git(repo_dir, "tag", "rooted/tags/are/tricky")
    run_git(repo_dir, "tag", "-a", "-m", "annotated", "annotated")
    return str(repo_dir)
