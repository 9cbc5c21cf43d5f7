"""
domain.nutrition - Nutrient profile aggregation.

Pure functions, no I/O. A user's nutrient profile is the per-nutrient
maximum priority (high > medium > low) across all of their conditions.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from domain.models import Priority

TAG_SUFFIX = "-rich"


def compute_needs(
    condition_nutrients: Iterable[Mapping[str, object]],
) -> dict[str, Priority]:
    """Merge each condition's recommended-nutrient map into one profile.

    Args:
        condition_nutrients: One nutrient -> priority mapping per condition.
            Priority values may be Priority members or their string values.

    Returns:
        nutrient -> Priority. Unknown priority levels rank below "low" and
        are ignored. Empty when there are no conditions.
    """
    needs: dict[str, Priority] = {}
    for nutrients in condition_nutrients:
        for nutrient, level in (nutrients or {}).items():
            priority = Priority.parse(level)
            if priority is None:
                continue
            current = needs.get(nutrient)
            if current is None or priority.rank > current.rank:
                needs[nutrient] = priority
    return needs


def high_priority_nutrients(profile: Mapping[str, Priority]) -> list[str]:
    """Nutrients whose priority is exactly HIGH, in profile order."""
    return [n for n, level in profile.items() if Priority.parse(level) is Priority.HIGH]


def nutrient_tag(nutrient: str) -> str:
    """Catalog tag for recipes rich in a nutrient, e.g. 'fiber-rich'."""
    return f"{nutrient}{TAG_SUFFIX}"


def target_tags(profile: Mapping[str, Priority]) -> list[str]:
    """Tags derived from the profile's high-priority nutrients."""
    return [nutrient_tag(n) for n in high_priority_nutrients(profile)]


def profile_to_dict(profile: Mapping[str, Priority]) -> dict[str, str]:
    """Plain-string view of a profile for JSON responses and prompts."""
    return {n: Priority(level).value for n, level in profile.items()}
