# File: /tests/test_column_mapper.py | Version: 1.0 | Path: /tests/test_column_mapper.py
from datetime import UTC, datetime

import pytest

from app.core.errors import ValidationError
from app.crud.databases import ColumnMapper, normalize_choices, slugify_choice
from app.crud.templates import make_column


def _mapper():
    return ColumnMapper(
        [
            make_column("Notes", "text", 1),
            make_column("Title", "text", 0),
            make_column(
                "Severity",
                "select",
                2,
                options=normalize_choices([{"label": "Low"}, {"label": "High"}]),
            ),
            make_column(
                "Labels",
                "multi-select",
                3,
                options=normalize_choices([{"label": "UI"}, {"label": "API"}]),
            ),
        ]
    )


def test_columns_are_ordered_by_order_field():
    assert [c["name"] for c in _mapper().columns] == ["Title", "Notes", "Severity", "Labels"]


def test_to_ids_drops_unknown_names():
    m = _mapper()
    by_id, dropped = m.to_ids({"Title": "A", "Nope": 1})
    assert dropped == ["Nope"]
    assert by_id == {m.column_by_name("Title")["id"]: "A"}
    assert m.to_names(by_id) == {"Title": "A"}


def test_to_names_ignores_ids_not_in_schema():
    m = _mapper()
    title_id = m.column_by_name("Title")["id"]
    assert m.to_names({title_id: "x", "gone-column": "y"}) == {"Title": "x"}


def test_select_cells_must_use_choice_ids():
    m = _mapper()
    severity = m.column_by_name("Severity")["id"]
    labels = m.column_by_name("Labels")["id"]

    m.validate_cells({severity: "low", labels: ["ui", "api"]})
    m.validate_cells({severity: None, labels: "ui"})

    with pytest.raises(ValidationError):
        m.validate_cells({severity: "Low"})  # label, not id
    with pytest.raises(ValidationError):
        m.validate_cells({labels: ["ui", "mobile"]})
    with pytest.raises(ValidationError):
        m.validate_cells({severity: ["low"]})


def test_denormalize_emits_bookkeeping_and_all_columns():
    m = _mapper()
    title_id = m.column_by_name("Title")["id"]
    created = datetime(2024, 1, 2, 3, 4, 5)
    row = {
        "id": "r1",
        "row_order": 7,
        "created_at": created,
        "updated_at": created.replace(tzinfo=UTC),
        "deleted_at": None,
        "cells": {title_id: "Hello"},
    }
    out = m.denormalize(row)
    assert out["_id"] == "r1"
    assert out["_order"] == 7
    assert out["_created_at"] == "2024-01-02T03:04:05+00:00"
    assert out["_updated_at"] == "2024-01-02T03:04:05+00:00"
    assert out["Title"] == "Hello"
    assert out["Notes"] is None


def test_choice_ids_from_labels():
    assert slugify_choice("In  Progress ") == "in_progress"
    choices = normalize_choices([{"label": "Low"}, {"label": "Very High", "color": "bg-red-200"}])
    assert choices["choices"] == [
        {"id": "low", "label": "Low", "color": "bg-gray-200"},
        {"id": "very_high", "label": "Very High", "color": "bg-red-200"},
    ]


def test_duplicate_choice_ids_are_rejected():
    with pytest.raises(ValidationError):
        normalize_choices([{"label": "Low"}, {"label": "low"}])
