from __future__ import annotations

import pytest

from disasterprep.catalog import (
    CONTACTS_SEED,
    HAZARDS,
    QUIZ_BANK,
    REGIONS,
    Region,
    default_region,
    priority_tips,
    region_by_id,
)


def test_region_ids_are_unique_and_default_is_punjab() -> None:
    ids = [r.region_id for r in REGIONS]

    assert len(ids) == len(set(ids)) == 6
    assert default_region().region_id == "punjab"


def test_region_lookup() -> None:
    assert region_by_id("odisha").city == "Bhubaneswar"
    assert region_by_id("atlantis") is None
    assert region_by_id(None) is None
    assert region_by_id(7) is None


def test_every_hazard_module_has_a_question() -> None:
    assert {h.key for h in HAZARDS} == set(QUIZ_BANK)


def test_priority_tips_skip_tags_without_tips() -> None:
    tips = priority_tips(region_by_id("punjab"))

    assert [tag for tag, _ in tips] == ["flood"]
    assert len(tips[0][1]) == 2

    assert priority_tips(region_by_id("delhi")) == []


def test_priority_tips_two_hazards() -> None:
    tips = priority_tips(region_by_id("maharashtra"), per_hazard=1)

    assert [tag for tag, _ in tips] == ["flood", "fire"]
    assert all(len(lines) == 1 for _, lines in tips)


def test_region_requires_focus() -> None:
    with pytest.raises(ValueError):
        Region("nowhere", "Nowhere", "Nowhere", ())


def test_contacts_seed() -> None:
    assert [c.name for c in CONTACTS_SEED] == [
        "Campus Security",
        "Fire Brigade",
        "Ambulance",
        "NDMA Helpline",
        "Principal Office",
    ]
