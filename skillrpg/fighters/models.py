from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Optional

# camelCase JSON key -> attribute name, for the optional profile fields
_OPTIONAL_FIELDS = {
    "fullName": "full_name",
    "callsign": "callsign",
    "rank": "rank",
    "unit": "unit",
    "notes": "notes",
    "status": "status",
}


@dataclass
class Fighter:
    id: str
    name: str  # legacy display name
    full_name: Optional[str] = None
    callsign: Optional[str] = None
    rank: Optional[str] = None
    unit: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.callsign or self.full_name or self.name

    def to_dict(self) -> dict:
        data = {"id": self.id, "name": self.name}
        for key, attr in _OPTIONAL_FIELDS.items():
            value = getattr(self, attr)
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Fighter":
        kwargs = {attr: data.get(key) for key, attr in _OPTIONAL_FIELDS.items()}
        return cls(id=data["id"], name=data.get("name", ""), **kwargs)


FIGHTER_META_FIELDS = frozenset(f.name for f in fields(Fighter)) - {"id", "name"}
