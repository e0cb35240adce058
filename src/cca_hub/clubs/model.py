from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..core.enums import Category, Commitment, SportType

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
BLOCK_TYPES = ("text", "gallery", "cta")


@dataclass(frozen=True)
class ScheduleSlot:
    day: str
    start_time: str  # "18:00", 24-hour
    end_time: str
    location: str

    def to_document(self) -> dict:
        return {
            "day": self.day,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "location": self.location,
        }

    @classmethod
    def from_document(cls, doc: dict) -> "ScheduleSlot":
        return cls(
            day=doc.get("day", ""),
            start_time=doc.get("startTime", ""),
            end_time=doc.get("endTime", ""),
            location=doc.get("location", ""),
        )


@dataclass(frozen=True)
class Club:
    """Domain entity: a CCA as stored in the ``clubs`` collection.

    ``schedule`` is only kept for Schedule Based clubs. ``blocks`` are free-form
    page-builder content ({id, type, order, config}) and are passed through.
    """

    club_id: str
    name: str
    category: Category
    commitment: Commitment
    schedule: Optional[tuple[ScheduleSlot, ...]] = None
    sport_type: Optional[SportType] = None
    hero_image: Optional[str] = None
    short_description: Optional[str] = None
    blocks: tuple[dict, ...] = ()
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_document(self) -> dict:
        doc: dict[str, Any] = {
            "_id": self.club_id,
            "name": self.name,
            "category": self.category.value,
            "commitment": self.commitment.value,
            "blocks": [dict(b) for b in self.blocks],
            "createdBy": self.created_by,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.schedule is not None:
            doc["schedule"] = [s.to_document() for s in self.schedule]
        if self.sport_type is not None:
            doc["sportType"] = self.sport_type.value
        if self.hero_image is not None:
            doc["heroImage"] = self.hero_image
        if self.short_description is not None:
            doc["shortDescription"] = self.short_description
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Club":
        schedule = doc.get("schedule")
        sport_type = doc.get("sportType")
        return cls(
            club_id=str(doc["_id"]),
            name=doc["name"],
            category=Category(doc["category"]),
            commitment=Commitment(doc["commitment"]),
            schedule=tuple(ScheduleSlot.from_document(s) for s in schedule) if schedule is not None else None,
            sport_type=SportType(sport_type) if sport_type else None,
            hero_image=doc.get("heroImage"),
            short_description=doc.get("shortDescription"),
            blocks=tuple(doc.get("blocks") or ()),
            created_by=doc.get("createdBy"),
            created_at=doc.get("createdAt"),
            updated_at=doc.get("updatedAt"),
        )

    def to_dict(self) -> dict:
        """JSON view (same keys as the document, timestamps as ISO strings)."""
        doc = self.to_document()
        for key in ("createdAt", "updatedAt"):
            if doc.get(key) is not None:
                doc[key] = doc[key].isoformat()
        return doc
