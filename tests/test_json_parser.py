"""Unit tests for the JSON import parser."""

from pathlib import Path

from glucose_log.infrastructure.parsers.json_parser import ImportParser


def test_parse_bare_array() -> None:
    """Test that a bare array of entries is accepted as-is."""
    parser = ImportParser()

    result = parser.parse_text(
        '[{"id": "a1", "value": 6.2, "timestamp": "2024-01-01T08:00:00Z", "note": "fasting"},'
        ' {"id": "a2", "value": 9, "timestamp": "2024-01-01T12:00:00+01:00"}]'
    )

    if not result.ok:
        raise AssertionError(f"Expected success, got {result.error}")
    if [e.id for e in result.entries] != ["a1", "a2"]:
        raise AssertionError(f"Expected ids to be preserved, got {result.entries}")
    if result.entries[0].note != "fasting" or result.entries[1].value != 9.0:
        raise AssertionError(f"Unexpected entries: {result.entries}")


def test_missing_and_duplicate_ids_are_regenerated() -> None:
    """Test that missing or repeated ids get fresh identifiers."""
    parser = ImportParser()

    result = parser.parse_document(
        [
            {"value": 5.0, "timestamp": "2024-01-01T08:00:00Z"},
            {"id": "dup", "value": 6.0, "timestamp": "2024-01-02T08:00:00Z"},
            {"id": "dup", "value": 7.0, "timestamp": "2024-01-03T08:00:00Z"},
            {"id": 42, "value": 8.0, "timestamp": "2024-01-04T08:00:00Z"},
        ]
    )

    if not result.ok:
        raise AssertionError(f"Expected success, got {result.error}")
    ids = [e.id for e in result.entries]
    if len(set(ids)) != 4:
        raise AssertionError(f"Expected 4 distinct ids, got {ids}")
    if ids[1] != "dup":
        raise AssertionError(f"Expected first 'dup' id to be kept, got {ids}")
    if not all(isinstance(i, str) and i for i in ids):
        raise AssertionError(f"Expected non-empty string ids, got {ids}")


def test_rejects_unsupported_shapes() -> None:
    """Test that documents without an entry array are rejected."""
    parser = ImportParser()

    for text in ['{"foo": 1}', '{"sugarLogs": {"value": 5}}', '"text"', "42", "null", "not json"]:
        result = parser.parse_text(text)
        if result.ok:
            raise AssertionError(f"Expected {text!r} to be rejected")
        if result.entries:
            raise AssertionError(f"Expected no entries for {text!r}")


def test_rejects_wrong_field_types() -> None:
    """Test that value must be numeric and timestamp a parseable string."""
    parser = ImportParser()
    bad_elements = [
        {"value": "5.0", "timestamp": "2024-01-01T00:00:00Z"},
        {"value": True, "timestamp": "2024-01-01T00:00:00Z"},
        {"value": 5.0, "timestamp": 1704067200},
        {"value": 5.0, "timestamp": "yesterday-ish"},
        {"timestamp": "2024-01-01T00:00:00Z"},
        {"value": 5.0},
        {"value": 5.0, "timestamp": "2024-01-01T00:00:00Z", "note": 7},
        "5.0",
    ]

    for element in bad_elements:
        good = {"value": 6.0, "timestamp": "2024-01-02T00:00:00Z"}
        result = parser.parse_document([good, element])
        if result.ok:
            raise AssertionError(f"Expected batch with {element!r} to be rejected")


def test_empty_array_is_valid() -> None:
    """Test that an empty array imports as an empty collection."""
    result = ImportParser().parse_text("[]")

    if not result.ok or result.entries != []:
        raise AssertionError(f"Expected empty success, got {result}")


def test_parse_file(tmp_path: Path) -> None:
    """Test parsing from disk, including a missing file."""
    parser = ImportParser()
    path = tmp_path / "backup.json"
    path.write_text(
        '{"sugarLogs": [{"value": 5, "timestamp": "2024-01-01T00:00:00Z"}]}', encoding="utf-8"
    )

    result = parser.parse_file(path)
    if not result.ok or len(result.entries) != 1:
        raise AssertionError(f"Expected one entry, got {result}")

    missing = parser.parse_file(tmp_path / "missing.json")
    if missing.ok:
        raise AssertionError("Expected failure for a missing file")


def test_rejects_out_of_range_utc_offset() -> None:
    """Test that a timestamp whose offset exceeds a day is rejected up front."""
    parser = ImportParser()

    result = parser.parse_document(
        [
            {"value": 6.0, "timestamp": "2024-01-02T00:00:00Z"},
            {"value": 5.0, "timestamp": "2024-01-01T00:00:00+99:00"},
        ]
    )

    if result.ok:
        raise AssertionError("Expected batch with a +99:00 offset to be rejected")
    if result.entries:
        raise AssertionError(f"Expected no entries, got {result.entries}")


def test_rejects_non_iso_timestamps() -> None:
    """Test that only ISO-8601 timestamps are accepted in import documents."""
    parser = ImportParser()

    for text in ["1", "March 3rd", "10:30", "01/02/2024"]:
        result = parser.parse_document([{"value": 5, "timestamp": text}])
        if result.ok:
            raise AssertionError(f"Expected timestamp {text!r} to be rejected")
