"""Shared test fixtures for the datastore test suite."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from yaml_datastore.datastore import Datastore
from yaml_datastore.loader import DocumentLoader


@pytest.fixture
def fixtures_dir() -> Path:
    """Returns the absolute path to the tests/fixtures/store/ directory."""
    return Path(__file__).parent / "fixtures" / "store"


@pytest.fixture
def store_dir(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Copies the fixture documents to a temp directory for test isolation."""
    dest = tmp_path / "store"
    shutil.copytree(fixtures_dir, dest)
    return dest


@pytest.fixture
def datastore(store_dir: Path) -> Datastore:
    """A Datastore over the fixture documents with default settings."""
    return Datastore.open(store_dir)


@pytest.fixture
def cached_datastore(store_dir: Path) -> Datastore:
    """A Datastore over the fixture documents that caches parsed documents."""
    return Datastore.open(store_dir, cache_policy="mtime")


@pytest.fixture
def loader(store_dir: Path) -> DocumentLoader:
    """A DocumentLoader over the fixture documents."""
    return DocumentLoader(store_dir)
