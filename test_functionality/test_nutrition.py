"""Nutrient profile aggregation: per-nutrient maximum priority across conditions."""

import asyncio
import itertools

from domain.models import Priority
from domain.nutrition import (
    compute_needs,
    high_priority_nutrients,
    nutrient_tag,
    profile_to_dict,
    target_tags,
)

H, M, L = Priority.HIGH, Priority.MEDIUM, Priority.LOW


def test_no_conditions_gives_empty_profile():
    assert compute_needs([]) == {}


def test_highest_priority_wins_per_nutrient():
    needs = compute_needs([
        {"fiber": L, "protein": M},
        {"fiber": H},
        {"protein": L, "iron": M},
    ])
    assert needs == {"fiber": H, "protein": M, "iron": M}


def test_result_does_not_depend_on_condition_order():
    maps = [
        {"fiber": "high", "sodium": "low"},
        {"fiber": "medium", "potassium": "high"},
        {"sodium": "medium", "calcium": "low"},
    ]
    results = [compute_needs(p) for p in itertools.permutations(maps)]
    assert all(r == results[0] for r in results)
    assert results[0] == {"fiber": H, "sodium": M, "potassium": H, "calcium": L}


def test_string_levels_are_parsed_and_unknown_levels_ignored():
    needs = compute_needs([{"fiber": "HIGH ", "vitamin_x": "extreme", "zinc": None}])
    assert needs == {"fiber": H}


def test_only_exact_high_drives_target_tags():
    profile = {"fiber": H, "protein": M, "sodium": L, "potassium": H}
    assert high_priority_nutrients(profile) == ["fiber", "potassium"]
    assert target_tags(profile) == ["fiber-rich", "potassium-rich"]
    assert target_tags({"protein": M, "sodium": L}) == []


def test_nutrient_tag_and_plain_dict():
    assert nutrient_tag("omega_3") == "omega_3-rich"
    assert profile_to_dict({"fiber": H, "sugar": L}) == {"fiber": "high", "sugar": "low"}


def test_user_needs_for_diabetes_and_hypertension(factory, ctx, diabetic_user):
    needs = asyncio.run(factory.create_nutrition_service().get_user_needs(ctx, diabetic_user))

    assert needs.nutritional_needs == {
        "fiber": H,
        "protein": M,
        "magnesium": M,
        "sugar": L,
        "potassium": H,
        "calcium": M,
        "sodium": L,
    }
    # newest condition first
    assert [c.name for c in needs.conditions] == ["Hypertension", "Type 2 Diabetes"]
    assert [c.severity for c in needs.conditions] == ["mild", "moderate"]


def test_user_needs_without_conditions(factory, ctx, user_id):
    needs = asyncio.run(factory.create_nutrition_service().get_user_needs(ctx, user_id))
    assert needs.conditions == []
    assert needs.nutritional_needs == {}
