"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides store and file-tree fixtures shared by all test packages.
"""

import os
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local filetree package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of filetree modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("filetree"):
        del sys.modules[module_name]

from filetree.store import MemoryStore, SqliteStore  # noqa: E402
from filetree.store.client import StorageClient  # noqa: E402


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> Generator[SqliteStore, None, None]:
    store = SqliteStore(tmp_path / "store.db")
    yield store
    store.close()


@pytest.fixture(params=["memory", "sqlite"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> Generator[StorageClient, None, None]:
    """Run a test once per store adapter."""
    if request.param == "memory":
        yield MemoryStore()
        return
    sqlite = SqliteStore(tmp_path / f"{request.param}.db")
    yield sqlite
    sqlite.close()


def write_tree(root: Path, layout: dict[str, str | bytes | dict]) -> Path:
    """Materialize a nested {name: content | {children}} mapping under root."""
    root.mkdir(parents=True, exist_ok=True)
    for name, content in layout.items():
        target = root / name
        if isinstance(content, dict):
            write_tree(target, content)
        elif isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content)
    return root


@pytest.fixture
def make_tree() -> Callable[[Path, dict], Path]:
    return write_tree


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Small tree with nested directories, an empty file and OS noise."""
    return write_tree(
        tmp_path / "home",
        {
            ".vimrc": "set nocompatible\n",
            ".DS_Store": b"\x00\x01",
            "Documents": {
                "My.File.TXT": "hello\n",
                "report 2024.pdf": b"%PDF-1.4",
                "Recipes": {"salsa.txt": "tomatoes\n", "empty.txt": ""},
            },
            "Music": {},
        },
    )


@pytest.fixture(autouse=True)
def isolated_config(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Keep the developer's global config file and FILETREE__ env vars out of tests."""
    missing = tmp_path_factory.mktemp("config") / "config.yaml"
    monkeypatch.setattr("filetree.config.loader.GLOBAL_CONFIG_PATH", missing)
    for name in list(os.environ):
        if name.upper().startswith("FILETREE__"):
            monkeypatch.delenv(name)
