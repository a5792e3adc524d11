from __future__ import annotations

import json
from datetime import UTC, datetime

import pytest

from contact_import.parsers.errors import FormatError
from contact_import.parsers.structured import new_placeholder_id, parse_structured_document

"""Structured-document (JSON) parser tests."""

NOW = datetime(2025, 1, 15, 9, 30, 0, tzinfo=UTC)


def _ids():
    counter = iter(range(1, 100))
    return lambda: f"tmp-{next(counter)}"


def test_full_record_is_mapped():
    body = json.dumps(
        [
            {
                "id": "c-1",
                "name": "ESIC Mumbai",
                "phone": "9876543210",
                "email": "esic@gov.in",
                "role": "payer_contact",
                "organization": "ESIC",
                "notes": "regional office",
                "createdAt": "2024-12-01T08:00:00Z",
            }
        ]
    )
    [c] = parse_structured_document(body, now=NOW)
    assert c.id == "c-1"
    assert c.name == "ESIC Mumbai"
    assert c.notes == "regional office"
    assert c.created_at == datetime(2024, 12, 1, 8, 0, 0, tzinfo=UTC)


def test_missing_keys_get_defaults_and_placeholder_id():
    [c] = parse_structured_document('[{"name": "Y"}]', now=NOW, id_factory=_ids())
    assert c.id == "tmp-1"
    assert c.phone == ""
    assert c.email == ""
    assert c.role == "other"
    assert c.organization == ""
    assert c.notes == ""
    assert c.created_at == NOW


def test_nameless_records_are_kept():
    contacts = parse_structured_document('[{"phone": "9876543210"}, {}]', now=NOW, id_factory=_ids())
    assert len(contacts) == 2
    assert contacts[0].name == ""
    assert contacts[0].phone == "9876543210"
    assert [c.id for c in contacts] == ["tmp-1", "tmp-2"]


def test_non_string_scalars_are_stringified():
    [c] = parse_structured_document('[{"name": "Asha", "phone": 9876543210}]', now=NOW)
    assert c.phone == "9876543210"


def test_null_values_use_defaults():
    [c] = parse_structured_document('[{"name": "Asha", "role": null, "email": null}]', now=NOW)
    assert c.role == "other"
    assert c.email == ""


def test_non_object_elements_are_treated_as_empty():
    contacts = parse_structured_document('["x", 3, null]', now=NOW, id_factory=_ids())
    assert len(contacts) == 3
    assert all(c.name == "" for c in contacts)


def test_invalid_created_at_falls_back_to_now():
    [c] = parse_structured_document('[{"name": "A", "createdAt": "yesterday"}]', now=NOW)
    assert c.created_at == NOW


def test_naive_created_at_is_read_as_utc():
    [c] = parse_structured_document('[{"name": "A", "createdAt": "2024-06-01T12:00:00"}]', now=NOW)
    assert c.created_at == datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


def test_empty_array_gives_no_contacts():
    assert parse_structured_document("[]", now=NOW) == []


@pytest.mark.parametrize("body", ["", "not json", "[{", "{'name': 'x'}"])
def test_invalid_json_raises_format_error(body):
    with pytest.raises(FormatError) as ei:
        parse_structured_document(body, now=NOW)
    assert str(ei.value) == "Invalid JSON format"


def test_deeply_nested_json_raises_format_error():
    with pytest.raises(FormatError) as ei:
        parse_structured_document("[" * 100000, now=NOW)
    assert str(ei.value) == "Invalid JSON format"


@pytest.mark.parametrize("body,kind", [('{"name": "x"}', "dict"), ('"text"', "str"), ("42", "int")])
def test_non_array_top_level_raises_format_error(body, kind):
    with pytest.raises(FormatError) as ei:
        parse_structured_document(body, now=NOW)
    assert str(ei.value) == f"Invalid JSON format - expected array of contacts, got {kind}"


def test_format_error_is_a_value_error():
    with pytest.raises(ValueError):
        parse_structured_document("nope")


def test_placeholder_ids_are_unique():
    ids = {new_placeholder_id() for _ in range(50)}
    assert len(ids) == 50
