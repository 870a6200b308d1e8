from __future__ import annotations

import dataclasses

import pytest

from lib_typed_dotenv.domain.records import IDLE, CacheEntry, ContinuationState, VariableRecord


def test_variable_record_fills_display_raw_and_source_file() -> None:
    record = VariableRecord(key="PORT", value="8080", type="number", source="/srv/app/.env.local")

    assert record.display_value == "8080"
    assert record.raw_value == "8080"
    assert record.source_file == ".env.local"


def test_variable_record_keeps_explicit_metadata() -> None:
    record = VariableRecord(
        key="DEBUG",
        value="true",
        type="boolean",
        display_value="yes",
        raw_value="${FLAG}",
        comment="dev only",
        quote_char='"',
        source="/app/.env",
        source_file="custom",
    )

    assert record.to_dict() == {
        "key": "DEBUG",
        "value": "true",
        "type": "boolean",
        "display_value": "yes",
        "raw_value": "${FLAG}",
        "comment": "dev only",
        "quote_char": '"',
        "source": "/app/.env",
        "source_file": "custom",
    }


def test_variable_record_is_frozen() -> None:
    record = VariableRecord(key="A", value="1")

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.value = "2"  # type: ignore[misc]


def test_idle_state_is_not_multi_line() -> None:
    assert IDLE.in_multi_line is False
    assert IDLE.value_lines == ()


def test_active_continuation_requires_key_and_type() -> None:
    with pytest.raises(ValueError):
        ContinuationState(in_multi_line=True, key=None, continuation_type="quoted")
    with pytest.raises(ValueError):
        ContinuationState(in_multi_line=True, key="A", continuation_type=None)


def test_append_returns_new_state_and_leaves_original_alone() -> None:
    state = ContinuationState(in_multi_line=True, key="A", value_lines=("one",), continuation_type="quoted", quote_char="'")

    grown = state.append("two")

    assert grown.value_lines == ("one", "two")
    assert grown.quote_char == "'"
    assert state.value_lines == ("one",)


def test_cache_entry_variables_are_read_only_snapshot() -> None:
    source = {"A": VariableRecord(key="A", value="1")}
    entry = CacheEntry(mtime=3.0, variables=source)
    source["B"] = VariableRecord(key="B", value="2")

    assert list(entry.variables) == ["A"]
    with pytest.raises(TypeError):
        entry.variables["C"] = VariableRecord(key="C", value="3")  # type: ignore[index]
