"""
domain - Entities, value objects, ports and pure nutrient aggregation.

No framework or database imports.
"""
