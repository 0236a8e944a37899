"""Static catalogue of known substations for the public substation view."""

from __future__ import annotations


DEFAULT_VOLTAGE = "110/10 кВ"
DEFAULT_INSTALLED_POWER = "2 × 25 МВА"
DEFAULT_STATUS = "operational"

_CATALOGUE: dict[str, dict[str, str]] = {
    "ps-164": {
        "name": "ПС-164",
        "location": "Северная промзона Хоргос",
        "description": "Главная понизительная подстанция №164. Обслуживает северную часть промзоны.",
    },
    "ps-64": {
        "name": "ПС-64",
        "location": "Южная промзона Хоргос",
        "description": "Резервная понизительная подстанция №64. Обслуживает южную часть промзоны.",
    },
}


def describe_substation(substation_id: str) -> dict[str, str]:
    """Catalogue metadata, with generic fallbacks for unknown ids."""
    entry = _CATALOGUE.get(substation_id, {})
    return {
        "id": substation_id,
        "name": entry.get("name", f"Подстанция {substation_id}"),
        "location": entry.get("location", "Промзона Хоргос"),
        "description": entry.get("description", "Понизительная подстанция. Обслуживает промзону Хоргос."),
        "voltage": DEFAULT_VOLTAGE,
        "installed_power": DEFAULT_INSTALLED_POWER,
        "status": DEFAULT_STATUS,
    }
