"""
infrastructure.persistence.seed - Medical condition catalog seed data.

Conditions and their nutrient priorities are a flat static lookup; seeding
inserts any catalog entry that is missing and leaves existing ones alone.
"""

from __future__ import annotations

import logging

from domain.entities import MedicalCondition
from domain.models import Priority
from infrastructure.persistence.condition_repo import SQLiteConditionRepository

logger = logging.getLogger(__name__)

H, M, L = Priority.HIGH, Priority.MEDIUM, Priority.LOW

CONDITION_CATALOG: list[tuple[str, str, dict[str, Priority]]] = [
    (
        "Type 2 Diabetes",
        "Impaired blood sugar regulation; favour slow carbohydrates and fibre.",
        {"fiber": H, "protein": M, "magnesium": M, "sugar": L},
    ),
    (
        "Hypertension",
        "High blood pressure; emphasise potassium and keep sodium low.",
        {"potassium": H, "magnesium": M, "calcium": M, "sodium": L},
    ),
    (
        "Iron Deficiency Anemia",
        "Low iron stores; pair iron-rich foods with vitamin C.",
        {"iron": H, "vitamin_c": H, "folate": M, "vitamin_b12": M},
    ),
    (
        "Osteoporosis",
        "Reduced bone density; prioritise calcium and vitamin D.",
        {"calcium": H, "vitamin_d": H, "protein": M, "magnesium": M},
    ),
    (
        "High Cholesterol",
        "Elevated LDL; increase soluble fibre and unsaturated fats.",
        {"fiber": H, "omega_3": H, "saturated_fat": L},
    ),
    (
        "Chronic Kidney Disease",
        "Reduced kidney function; moderate protein, limit potassium and phosphorus.",
        {"protein": L, "potassium": L, "phosphorus": L, "sodium": L, "calcium": M},
    ),
    (
        "Celiac Disease",
        "Gluten intolerance; replace nutrients commonly lost with gluten-free diets.",
        {"fiber": M, "iron": M, "calcium": M, "folate": M},
    ),
    (
        "Heart Disease",
        "Cardiovascular disease; omega-3 fats and fibre support heart health.",
        {"omega_3": H, "fiber": H, "potassium": M, "sodium": L},
    ),
    (
        "Vitamin D Deficiency",
        "Low vitamin D levels; support with fortified foods and fatty fish.",
        {"vitamin_d": H, "calcium": M},
    ),
    (
        "Pregnancy",
        "Increased needs for folate, iron and calcium.",
        {"folate": H, "iron": H, "calcium": H, "protein": M, "omega_3": M},
    ),
]


async def seed_conditions(repo: SQLiteConditionRepository) -> int:
    """Insert missing catalog entries. Returns the number inserted."""
    inserted = 0
    for name, description, nutrients in CONDITION_CATALOG:
        if await repo.get_by_name(name) is not None:
            continue
        await repo.save(MedicalCondition(
            name=name,
            description=description,
            recommended_nutrients=nutrients,
        ))
        inserted += 1
    if inserted:
        logger.info("Seeded %d medical condition(s)", inserted)
    return inserted
