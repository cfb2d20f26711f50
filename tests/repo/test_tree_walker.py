import pytest
from gitserve.repo import *
import helpers_repo as helpers

async def test_walk__root_listing():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    result = await walker.walk_object(ids["commit"], "/blob/x", "")
    assert result.kind == ObjectKind.TREE
    html = result.content.decode()
    assert 'href="/blob/x/README"' in html
    assert 'href="/blob/x/src/"' in html
    assert 'href="/blob/x/vendor"' in html

async def test_walk__blob():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    assert await walker.walk(ids["commit"], "/blob/x", "README") == b"hello\n"
    assert await walker.walk("heads/master", "/blob/x", "src/pkg/util.py") == b"\x00\x01binary"
    result = await walker.walk_object("v1", "/blob/x", "src/main.py")
    assert result == WalkResult(ObjectKind.BLOB, b"print('main')\n")

async def test_walk__nested_tree_listing():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    result = await walker.walk_object(ids["root"], "/blob/x/src/pkg", "src/pkg")
    assert result.kind == ObjectKind.TREE
    assert 'href="/blob/x/src/pkg/util.py"' in result.content.decode()
    #a trailing slash in the residual path is the same tree
    result_2 = await walker.walk_object(ids["root"], "/blob/x/src/pkg", "src/pkg/")
    assert result_2 == result

async def test_walk__file_not_found():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    with pytest.raises(FileNotInTreeError) as e:
        await walker.walk(ids["commit"], "/blob/x", "quack")
    assert str(e.value) == "file not found in tree"
    with pytest.raises(FileNotInTreeError):
        await walker.walk(ids["commit"], "/blob/x", "src/quack/deeper")
    #no case folding
    with pytest.raises(FileNotInTreeError):
        await walker.walk(ids["commit"], "/blob/x", "readme")

async def test_walk__blob_in_the_middle_of_the_path():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    with pytest.raises(PathConflictError) as e:
        await walker.walk(ids["commit"], "/blob/x", "README/more")
    assert str(e.value).startswith("this is a directory, not an object")

async def test_walk__unsupported_object_type():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    with pytest.raises(UnsupportedObjectTypeError) as e:
        await walker.walk(ids["commit"], "/blob/x", "vendor")
    assert str(e.value).startswith("unsupported object type")
    with pytest.raises(UnsupportedObjectTypeError):
        await walker.walk(ids["commit"], "/blob/x", "vendor/file")

async def test_walk__bad_root():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    with pytest.raises(BackendError):
        await walker.walk("invalid_hash", "/blob/x", "README")
    #a blob is not a tree either
    with pytest.raises(BackendError):
        await walker.walk(ids["readme"], "/blob/x", "")

async def test_walk__listing_links_walk_back_to_the_entries():
    backend, ids = helpers.setup_backend()
    walker = TreeWalker(backend)
    prefix = f"/blob/{ids['commit']}/src"
    html = (await walker.walk(ids["commit"], prefix, "src")).decode()
    link = f"{prefix}/main.py"
    assert f'href="{link}"' in html
    residual = link[len(f"/blob/{ids['commit']}/"):]
    assert await walker.walk(ids["commit"], prefix, residual) == b"print('main')\n"
