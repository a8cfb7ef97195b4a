"""Tests for the Datastore facade."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest
from pydantic import BaseModel

from yaml_datastore.cache import CachePolicy
from yaml_datastore.config import Config
from yaml_datastore.datastore import Datastore
from yaml_datastore.errors import (
    CannotDescendIntoScalarError,
    ConfigError,
    DatastoreError,
    DocumentNotFoundError,
    EmptyKeypathError,
    ErrorCodes,
    ErrorStage,
    IndexOutOfBoundsError,
    InvalidKeypathError,
    InvalidSelectorError,
    KeyNotFoundError,
    NotAnIndexError,
    ParseFailureError,
    StoreNotFoundError,
    TypeMismatchError,
)
from yaml_datastore.value import BoolNode, MappingNode, from_python


class RecordFormat(BaseModel):
    name: str
    id: int
    rating: Optional[float] = None
    complete: bool = False
    tags: list[str] = []


# === Scenario over complete.yaml ===


class TestScenario:
    def test_nested_bool(self, datastore: Datastore) -> None:
        assert datastore.get("complete.nested.value", bool) is True

    def test_string(self, datastore: Datastore) -> None:
        assert datastore.get("complete.name", str) == "Complete"

    def test_integer(self, datastore: Datastore) -> None:
        assert datastore.get("complete.id", int) == 1

    def test_sequence_element(self, datastore: Datastore) -> None:
        assert datastore.get("complete.tags.1", str) == "done"

    def test_index_out_of_bounds(self, datastore: Datastore) -> None:
        with pytest.raises(IndexOutOfBoundsError):
            datastore.get("complete.tags.10", bool)

    def test_key_not_found(self, datastore: Datastore) -> None:
        with pytest.raises(KeyNotFoundError):
            datastore.get("complete.missing", bool)

    def test_type_mismatch(self, datastore: Datastore) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            datastore.get("complete.nested.value", int)
        assert exc_info.value.expected == "int"
        assert exc_info.value.actual == "bool"

    def test_document_not_found(self, datastore: Datastore) -> None:
        with pytest.raises(DocumentNotFoundError):
            datastore.get("nosuch.key", str)


# === get() ===


class TestGet:
    def test_whole_document_as_model(self, datastore: Datastore) -> None:
        assert datastore.get("complete", RecordFormat) == RecordFormat(
            name="Complete",
            id=1,
            rating=1.0,
            complete=True,
            tags=["complete", "done", "finished"],
        )

    def test_whole_document_with_defaults(self, datastore: Datastore) -> None:
        assert datastore.get("no_tags", RecordFormat) == RecordFormat(name="No Tags", id=2, rating=0.6)

    def test_whole_document_as_plain_data(self, datastore: Datastore) -> None:
        data = datastore.get("no_tags")
        assert data == {"name": "No Tags", "id": 2, "rating": 0.6}

    def test_composite_leaf(self, datastore: Datastore) -> None:
        assert datastore.get("complete.tags", list[str]) == ["complete", "done", "finished"]
        assert datastore.get("complete.nested", dict[str, bool]) == {"value": True}

    def test_sequence_as_tuple_and_set(self, datastore: Datastore) -> None:
        assert datastore.get("complete.tags", tuple[str, ...]) == ("complete", "done", "finished")
        assert datastore.get("complete.tags", set[str]) == {"complete", "done", "finished"}

    def test_float(self, datastore: Datastore) -> None:
        assert datastore.get("complete.rating", float) == 1.0

    def test_scalar_round_trips_to_same_node(self, datastore: Datastore) -> None:
        for keypath, target in [
            ("complete.name", str),
            ("complete.id", int),
            ("complete.rating", float),
            ("complete.complete", bool),
        ]:
            assert from_python(datastore.get(keypath, target)) == datastore.resolve(keypath)

    def test_idempotent(self, datastore: Datastore) -> None:
        assert datastore.get("complete.tags.2", str) == datastore.get("complete.tags.2", str)
        errors = []
        for _ in range(2):
            with pytest.raises(KeyNotFoundError) as exc_info:
                datastore.get("complete.missing")
            errors.append((exc_info.value.code, exc_info.value.details))
        assert errors[0] == errors[1]

    def test_whitespace_in_keypath(self, datastore: Datastore) -> None:
        assert datastore.get(" complete . tags . 0 ", str) == "complete"


# === Failure tagging ===


class TestFailureTagging:
    def test_navigation_failure(self, datastore: Datastore) -> None:
        with pytest.raises(KeyNotFoundError) as exc_info:
            datastore.get("complete.nested.missing")
        err = exc_info.value
        assert err.keypath == "complete.nested.missing"
        assert err.segment_index == 2
        assert err.path == "complete.nested"
        assert err.stage is ErrorStage.NAVIGATION

    def test_document_not_found_tagged_at_selector(self, datastore: Datastore) -> None:
        with pytest.raises(DocumentNotFoundError) as exc_info:
            datastore.get("nosuch.key", str)
        assert exc_info.value.keypath == "nosuch.key"
        assert exc_info.value.segment_index == 0

    def test_conversion_failure_tagged_at_last_segment(self, datastore: Datastore) -> None:
        with pytest.raises(TypeMismatchError) as exc_info:
            datastore.get("complete.nested.value", int)
        assert exc_info.value.keypath == "complete.nested.value"
        assert exc_info.value.segment_index == 2
        assert exc_info.value.path == "complete.nested.value"

    @pytest.mark.parametrize("keypath", ["complete.name.first", "complete.id.x", "complete.complete.x"])
    def test_scalar_dead_end(self, datastore: Datastore, keypath: str) -> None:
        with pytest.raises(CannotDescendIntoScalarError):
            datastore.get(keypath)

    def test_not_an_index_on_sequence(self, datastore: Datastore) -> None:
        with pytest.raises(NotAnIndexError):
            datastore.get("complete.tags.first")

    def test_empty_keypath(self, datastore: Datastore) -> None:
        with pytest.raises(EmptyKeypathError) as exc_info:
            datastore.get("")
        assert exc_info.value.code == ErrorCodes.EMPTY_KEYPATH
        assert exc_info.value.segment_index == 0

    def test_empty_segment(self, datastore: Datastore) -> None:
        with pytest.raises(InvalidKeypathError):
            datastore.get("complete..name")

    @pytest.mark.parametrize("keypath", [".complete", "sub/complete.name", "/etc/passwd"])
    def test_invalid_selector(self, datastore: Datastore, keypath: str) -> None:
        with pytest.raises(InvalidSelectorError) as exc_info:
            datastore.get(keypath)
        assert exc_info.value.segment_index == 0

    def test_parse_failure(self, datastore: Datastore, store_dir: Path) -> None:
        (store_dir / "broken.yaml").write_text("key: [unclosed\n")
        with pytest.raises(ParseFailureError) as exc_info:
            datastore.get("broken.key")
        assert exc_info.value.selector == "broken"

    def test_document_not_found_never_parses(
        self, datastore: Datastore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def fail(*args: Any, **kwargs: Any) -> Any:
            raise AssertionError("parse attempted")

        monkeypatch.setattr("yaml_datastore.loader.DocumentLoader.parse", fail)
        with pytest.raises(DocumentNotFoundError):
            datastore.get("nosuch")

    def test_all_errors_share_base_class(self, datastore: Datastore) -> None:
        with pytest.raises(DatastoreError):
            datastore.get("complete.tags.99")


# === resolve() and other accessors ===


class TestAccessors:
    def test_resolve_returns_node(self, datastore: Datastore) -> None:
        assert datastore.resolve("complete.nested.value") == BoolNode(True)
        assert isinstance(datastore.resolve("complete"), MappingNode)

    def test_resolve_failure_tagged(self, datastore: Datastore) -> None:
        with pytest.raises(KeyNotFoundError) as exc_info:
            datastore.resolve("complete.missing")
        assert exc_info.value.keypath == "complete.missing"

    def test_documents(self, datastore: Datastore) -> None:
        assert datastore.documents() == ["complete", "no_tags"]

    def test_root_and_repr(self, datastore: Datastore, store_dir: Path) -> None:
        assert datastore.root == store_dir.resolve()
        assert repr(datastore) == f"Datastore(root={str(store_dir.resolve())!r}, cache_policy='none')"


# === Construction and settings ===


class TestConstruction:
    def test_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(StoreNotFoundError) as exc_info:
            Datastore.open(tmp_path / "absent")
        assert exc_info.value.root == str((tmp_path / "absent").resolve())

    def test_root_is_a_file(self, tmp_path: Path) -> None:
        path = tmp_path / "file.yaml"
        path.write_text("a: 1\n")
        with pytest.raises(StoreNotFoundError, match="not a directory"):
            Datastore.open(path)

    def test_deferred_root_validation(self, tmp_path: Path) -> None:
        store = Datastore.open(tmp_path / "absent", validate_root=False)
        with pytest.raises(DocumentNotFoundError):
            store.get("anything")

    def test_config_settings(self, store_dir: Path) -> None:
        (store_dir / "complete.yml").write_text("name: From yml\ncount: '3'\n")
        config = Config({"datastore": {"extensions": ["yml", "yaml"], "cache": "mtime", "strict_types": False}})
        store = Datastore.open(store_dir, config)
        assert store.cache_policy is CachePolicy.MTIME
        assert store.get("complete.name") == "From yml"
        assert store.get("complete.count", int) == 3

    def test_overrides_beat_config(self, store_dir: Path) -> None:
        config = Config({"datastore": {"cache": "mtime"}})
        store = Datastore.open(store_dir, config, cache_policy=CachePolicy.NONE)
        assert store.cache_policy is CachePolicy.NONE

    def test_invalid_cache_policy(self, store_dir: Path) -> None:
        with pytest.raises(ConfigError, match="cache policy"):
            Datastore.open(store_dir, cache_policy="forever")

    def test_invalid_strict_types(self, store_dir: Path) -> None:
        with pytest.raises(ConfigError):
            Datastore.open(store_dir, config=Config({"datastore": {"strict_types": "yes"}}))

    def test_invalid_validate_root(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="validate_root"):
            Datastore.open(tmp_path / "absent", config=Config({"datastore": {"validate_root": "false"}}))

    def test_unknown_encoding(self, store_dir: Path) -> None:
        with pytest.raises(ConfigError, match="no-such-codec") as exc_info:
            Datastore.open(store_dir, encoding="no-such-codec")
        assert isinstance(exc_info.value.cause, LookupError)

    @pytest.mark.parametrize("extensions", [None, 3, ["yaml", 5], [None]])
    def test_malformed_extensions(self, store_dir: Path, extensions: Any) -> None:
        with pytest.raises(ConfigError, match="extension"):
            Datastore.open(store_dir, config=Config({"datastore": {"extensions": extensions}}))


# === Cache policy ===


class TestCachedDatastore:
    def test_cached_results_match_uncached(self, datastore: Datastore, cached_datastore: Datastore) -> None:
        for keypath in ["complete", "complete.tags.1", "no_tags.rating"]:
            assert cached_datastore.get(keypath) == datastore.get(keypath)

    def test_cached_tree_is_shared(self, cached_datastore: Datastore) -> None:
        assert cached_datastore.resolve("complete") is cached_datastore.resolve("complete")

    def test_uncached_tree_is_fresh(self, datastore: Datastore) -> None:
        first = datastore.resolve("complete")
        second = datastore.resolve("complete")
        assert first == second
        assert first is not second

    def test_clear_cache(self, cached_datastore: Datastore) -> None:
        first = cached_datastore.resolve("complete")
        cached_datastore.clear_cache()
        assert cached_datastore.resolve("complete") is not first

    def test_uncached_sees_changes_immediately(self, datastore: Datastore, store_dir: Path) -> None:
        assert datastore.get("complete.name") == "Complete"
        (store_dir / "complete.yaml").write_text("name: Rewritten\n")
        assert datastore.get("complete.name") == "Rewritten"
