from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping, Optional

from .constants import DEFAULT_MONTHLY_FEE


@dataclass(frozen=True)
class CohortDef:
    name: str
    monthly_fee: int


@dataclass(frozen=True)
class ExamSlotDef:
    label: str
    start_time: datetime
    end_time: datetime
    capacity: int


@dataclass(frozen=True)
class Catalog:
    """Seeded reference data, loaded once from settings at startup.

    Cohorts double as class names (one fee-bearing class per grade label).
    """

    cohorts: tuple[CohortDef, ...]
    exam_slots: tuple[ExamSlotDef, ...]
    booking_cohorts: frozenset[str]

    @property
    def grade_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.cohorts)

    def has_grade(self, grade: str) -> bool:
        return grade in self.grade_names

    def can_book(self, grade: str) -> bool:
        return grade in self.booking_cohorts

    def fee_for(self, grade: str) -> Optional[int]:
        for c in self.cohorts:
            if c.name == grade:
                return c.monthly_fee
        return None


def _parse_dt(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def load_catalog(
    *,
    cohorts: Iterable[Mapping],
    exam_slots: Iterable[Mapping],
    booking_cohorts: Iterable[str],
) -> Catalog:
    cohort_specs = tuple(
        CohortDef(name=str(c["name"]).strip(), monthly_fee=int(c.get("monthly_fee", DEFAULT_MONTHLY_FEE)))
        for c in cohorts
    )
    names = [c.name for c in cohort_specs]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate cohort names in settings: {names!r}")

    slot_specs = []
    for s in exam_slots:
        capacity = int(s["capacity"])
        if capacity <= 0:
            raise ValueError(f"Exam slot {s.get('label')!r} must have a positive capacity")
        slot_specs.append(
            ExamSlotDef(
                label=str(s["label"]),
                start_time=_parse_dt(s["start_time"]),
                end_time=_parse_dt(s["end_time"]),
                capacity=capacity,
            )
        )

    allowed = frozenset(str(g) for g in booking_cohorts)
    unknown = allowed.difference(names)
    if unknown:
        raise ValueError(f"Booking cohorts not in cohort list: {sorted(unknown)!r}")

    return Catalog(cohorts=cohort_specs, exam_slots=tuple(slot_specs), booking_cohorts=allowed)


def catalog_from_settings(settings) -> Catalog:
    return load_catalog(
        cohorts=getattr(settings, "COHORTS"),
        exam_slots=getattr(settings, "EXAM_SLOTS"),
        booking_cohorts=getattr(settings, "BOOKING_COHORTS"),
    )
