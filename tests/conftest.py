import os

os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("MONGO_URI", "mongodb://localhost:27017")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DISABLE_EMAIL"] = "true"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timedelta

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from syllabus_hub.database import get_db
from syllabus_hub.main import app
from syllabus_hub.resources.resource_models import empty_distribution


@pytest.fixture
def db():
    return AsyncMongoMockClient()["syllabus_hub_test"]


@pytest.fixture
async def client(db):
    async def override_get_db():
        return db

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Insert a user directly and return the stored document"""
    counter = {"n": 0}

    async def _make(role="student", name=None, email=None):
        counter["n"] += 1
        n = counter["n"]
        user = {
            "name": name or f"User {n}",
            "email": email or f"user{n}@example.com",
            "password_hash": "not-a-real-hash",
            "role": role,
            "is_email_verified": True,
            "created_at": datetime.utcnow(),
            "updated_at": datetime.utcnow(),
        }
        result = await db.users.insert_one(user)
        user["_id"] = result.inserted_id
        return user

    return _make


@pytest.fixture
async def catalog(db):
    """
    Two branches (CSE, ECE), one program each, one year each with
    semesters 1 and 2, and subjects CS101 (CSE sem 1), CS102 (CSE sem 2),
    EC101 (ECE sem 1).
    """
    cse = (await db.branches.insert_one({"code": "CSE", "name": "Computer Science"})).inserted_id
    ece = (await db.branches.insert_one({"code": "ECE", "name": "Electronics"})).inserted_id

    ids = {"branches": {"CSE": cse, "ECE": ece}, "semesters": {}, "subjects": {}}
    for code, branch_id in (("CSE", cse), ("ECE", ece)):
        program_id = (await db.programs.insert_one({
            "code": f"BT-{code}", "name": f"B.Tech {code}", "branch_id": branch_id, "duration_years": 4
        })).inserted_id
        year_id = (await db.years.insert_one({"year": 1, "program_id": program_id})).inserted_id
        for number in (1, 2):
            ids["semesters"][(code, number)] = (await db.semesters.insert_one(
                {"number": number, "year_id": year_id}
            )).inserted_id

    for code, name, branch, number in (
        ("CS101", "Programming in C", "CSE", 1),
        ("CS102", "Data Structures", "CSE", 2),
        ("EC101", "Basic Electronics", "ECE", 1),
    ):
        ids["subjects"][code] = (await db.subjects.insert_one({
            "code": code,
            "name": name,
            "branch_id": ids["branches"][branch],
            "semester_id": ids["semesters"][(branch, number)],
            "credits": 4,
            "topics": [],
        })).inserted_id
    return ids


@pytest.fixture
def make_resource(db):
    counter = {"n": 0}

    async def _make(subject_id, added_by, **overrides):
        counter["n"] += 1
        n = counter["n"]
        resource = {
            "type": "notes",
            "title": f"Resource {n:03d}",
            "url": f"https://example.com/r/{n}",
            "description": "",
            "provider": "",
            "subject_id": subject_id,
            "topics": [],
            "tags": [],
            "prerequisites": [],
            "added_by": added_by,
            "is_approved": True,
            "quality_score": 0,
            "average_rating": 0,
            "total_ratings": 0,
            "rating_distribution": empty_distribution(),
            "created_at": datetime.utcnow() + timedelta(seconds=n),
            "updated_at": datetime.utcnow(),
        }
        resource.update(overrides)
        result = await db.resources.insert_one(resource)
        resource["_id"] = result.inserted_id
        return resource

    return _make


@pytest.fixture
def missing_id():
    return str(ObjectId())
