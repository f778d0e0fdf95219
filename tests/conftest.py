"""
Pytest configuration and fixtures.
"""
import copy
import os
from datetime import datetime, timezone

# cheap hashing for tests; must be set before academy.config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from academy.app import create_app
from academy.auth.helpers import create_access_token, hash_password
from academy.rbac import Role, get_role_permissions


class InMemoryUserRepository:
    """Dict-backed stand-in for UserRepository."""

    def __init__(self):
        self.docs: dict[ObjectId, dict] = {}

    def add(self, doc: dict) -> dict:
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self.docs[doc["_id"]] = doc
        return copy.deepcopy(doc)

    async def ensure_indexes(self) -> None:
        return None

    async def find_by_id(self, user_id: str):
        if not ObjectId.is_valid(user_id):
            return None
        doc = self.docs.get(ObjectId(user_id))
        return copy.deepcopy(doc) if doc else None

    async def find_by_email(self, email: str):
        for doc in self.docs.values():
            if doc.get("email") == email:
                return copy.deepcopy(doc)
        return None

    async def insert(self, doc: dict) -> dict:
        return self.add(doc)

    async def update(self, user_id: str, fields: dict):
        if not ObjectId.is_valid(user_id):
            return None
        doc = self.docs.get(ObjectId(user_id))
        if doc is None:
            return None
        doc.update(copy.deepcopy(fields))
        doc["updated_at"] = datetime.now(timezone.utc)
        return copy.deepcopy(doc)

    async def count_by_role(self, role: str) -> int:
        return sum(1 for doc in self.docs.values() if doc.get("role") == role)

    async def list_all(self) -> list[dict]:
        return [copy.deepcopy(doc) for doc in self.docs.values()]


def make_user(repo, role, email=None, password="secret123", **extra) -> dict:
    """Seed a user the way the user service would."""
    role = Role(role)
    now = datetime.now(timezone.utc)
    doc = {
        "name": f"{role.value} User",
        "email": email or f"{role.value.lower()}-{ObjectId()}@academy.edu",
        "password": hash_password(password),
        "role": role.value,
        "permissions": get_role_permissions(role),
        "must_reset_password": False,
        "created_at": now,
        "updated_at": now,
    }
    doc.update(extra)
    return repo.add(doc)


def auth_headers(user: dict) -> dict:
    token = create_access_token({"sub": str(user["_id"]), "role": user["role"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def repo():
    return InMemoryUserRepository()


@pytest.fixture
def app(repo):
    return create_app(user_repository=repo)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin(repo):
    return make_user(repo, Role.ADMIN, email="admin@academy.edu")


@pytest.fixture
def employee(repo):
    return make_user(repo, Role.EMPLOYEE, email="employee@academy.edu")


@pytest.fixture
def student(repo):
    return make_user(repo, Role.STUDENT, email="student@academy.edu")
