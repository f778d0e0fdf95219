"""
User persistence.

``UserRepository`` is the only thing that talks to the users collection. An
instance is built once by the application factory and handed to services
through ``app.state`` so tests can swap in their own implementation.
"""

from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ASCENDING, ReturnDocument


class UserRepository:
    def __init__(self, collection: AsyncIOMotorCollection):
        self.users = collection

    async def ensure_indexes(self) -> None:
        await self.users.create_index([("email", ASCENDING)], unique=True)

    async def find_by_id(self, user_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(user_id):
            return None
        return await self.users.find_one({"_id": ObjectId(user_id)})

    async def find_by_email(self, email: str) -> Optional[dict]:
        return await self.users.find_one({"email": email})

    async def insert(self, doc: dict) -> dict:
        result = await self.users.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def update(self, user_id: str, fields: dict) -> Optional[dict]:
        """Set ``fields`` on the user and return the updated document."""
        if not ObjectId.is_valid(user_id):
            return None
        fields = {**fields, "updated_at": datetime.now(timezone.utc)}
        return await self.users.find_one_and_update(
            {"_id": ObjectId(user_id)},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )

    async def count_by_role(self, role: str) -> int:
        return await self.users.count_documents({"role": role})

    async def list_all(self) -> list[dict]:
        cursor = self.users.find({}).sort("created_at", ASCENDING)
        return [doc async for doc in cursor]
