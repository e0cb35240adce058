from __future__ import annotations

from typing import Optional, Sequence

from pymongo import ASCENDING
from pymongo.collection import Collection

from ..core.enums import Category, Commitment
from ..database.mongo import MongoConnection
from .model import Club
from .repository import ClubRepository

COLLECTION = "clubs"


class MongoClubRepository(ClubRepository):
    def __init__(self, mongo: MongoConnection):
        self._mongo = mongo

    def _collection(self) -> Collection:
        return self._mongo.database()[COLLECTION]

    def list(self, *, category: Optional[Category] = None, commitment: Optional[Commitment] = None) -> Sequence[Club]:
        query: dict = {}
        if category is not None:
            query["category"] = category.value
        if commitment is not None:
            query["commitment"] = commitment.value

        cursor = self._collection().find(query).sort("name", ASCENDING)
        return [Club.from_document(doc) for doc in cursor]

    def get_by_id(self, club_id: str) -> Optional[Club]:
        doc = self._collection().find_one({"_id": club_id})
        return Club.from_document(doc) if doc else None

    def insert(self, club: Club) -> str:
        result = self._collection().insert_one(club.to_document())
        return str(result.inserted_id)

    def replace(self, club: Club) -> bool:
        result = self._collection().replace_one({"_id": club.club_id}, club.to_document())
        return result.matched_count > 0

    def delete(self, club_id: str) -> bool:
        result = self._collection().delete_one({"_id": club_id})
        return result.deleted_count > 0
