"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages,
and provides helpers to write schema inputs to disk.
"""

import os
import sqlite3
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of schemaforge modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("schemaforge"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def clean_env() -> Generator[None, None, None]:
    """Remove SCHEMAFORGE__* env vars for clean tests."""
    orig = {k: v for k, v in os.environ.items() if k.startswith("SCHEMAFORGE__")}
    for k in orig:
        del os.environ[k]
    yield
    for k in [k for k in os.environ if k.startswith("SCHEMAFORGE__")]:
        del os.environ[k]
    os.environ.update(orig)


@pytest.fixture
def make_database(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a SQLite database file from a SQL script."""

    def make(script: str, name: str = "test.db", user_version: int = 0) -> Path:
        path = tmp_path / name
        connection = sqlite3.connect(path)
        try:
            connection.executescript(script)
            connection.execute(f"PRAGMA user_version = {user_version}")
            connection.commit()
        finally:
            connection.close()
        return path

    return make


@pytest.fixture
def make_script(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a SQL script file."""

    def make(script: str, name: str = "schema.sql") -> Path:
        path = tmp_path / name
        path.write_text(script, encoding="utf-8")
        return path

    return make
