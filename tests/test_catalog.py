from __future__ import annotations

from types import SimpleNamespace

import pytest

from config import config as shared_settings
from src.class_manager.class_manager.core.catalog import catalog_from_settings, load_catalog


def test_catalog_from_shared_settings():
    catalog = catalog_from_settings(shared_settings)

    assert catalog.grade_names == ("Grade 6", "Grade 7", "Grade 8", "O/L")
    assert catalog.can_book("Grade 7")
    assert not catalog.can_book("Grade 6")
    assert catalog.fee_for("O/L") == 2500
    assert catalog.fee_for("Grade 12") is None
    assert [s.capacity for s in catalog.exam_slots] == [25, 24]


def test_duplicate_cohorts_rejected():
    with pytest.raises(ValueError):
        load_catalog(cohorts=[{"name": "A"}, {"name": "A"}], exam_slots=[], booking_cohorts=[])


def test_booking_cohort_must_exist():
    with pytest.raises(ValueError):
        load_catalog(cohorts=[{"name": "A"}], exam_slots=[], booking_cohorts=["B"])


def test_slot_capacity_must_be_positive():
    settings = SimpleNamespace(
        COHORTS=[{"name": "A"}],
        EXAM_SLOTS=[{"label": "S", "start_time": "2025-12-05T14:00:00", "end_time": "2025-12-05T17:00:00", "capacity": 0}],
        BOOKING_COHORTS=[],
    )
    with pytest.raises(ValueError):
        catalog_from_settings(settings)


def test_missing_fee_uses_default():
    catalog = load_catalog(cohorts=[{"name": "A"}], exam_slots=[], booking_cohorts=[])
    assert catalog.fee_for("A") == 2000
