from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Holiday:
    """Official holiday; at most one per calendar date."""

    holiday_id: int
    holiday_date: date
    name: str
    description: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.holiday_id,
            "date": self.holiday_date.isoformat(),
            "name": self.name,
            "description": self.description,
        }
