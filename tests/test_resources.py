import pytest

from syllabus_hub.resources.resource_service import build_resource_filter, sort_spec
from syllabus_hub.resources.resource_models import ResourceSort
from tests.helpers import auth_headers, user_context


class TestFilterComposer:
    async def test_public_filter_requires_approval(self, db):
        assert await build_resource_filter(db) == {"is_approved": True}

    async def test_include_unapproved_ignored_for_students(self, db, make_user):
        student = user_context(await make_user())
        query = await build_resource_filter(db, include_unapproved=True, user=student)
        assert query["is_approved"] is True

    async def test_include_unapproved_honoured_for_staff(self, db, make_user):
        moderator = user_context(await make_user(role="moderator"))
        query = await build_resource_filter(db, include_unapproved=True, user=moderator)
        assert "is_approved" not in query

    async def test_text_search_is_anded(self, db):
        query = await build_resource_filter(db, q="linked lists", type="notes")
        assert query == {
            "is_approved": True,
            "type": "notes",
            "$text": {"$search": "linked lists"},
        }

    async def test_unknown_branch_short_circuits(self, db, catalog):
        assert await build_resource_filter(db, branch="XX") is None

    async def test_unknown_semester_short_circuits(self, db, catalog):
        assert await build_resource_filter(db, semester=9) is None

    async def test_branch_and_semester_resolve_to_subjects(self, db, catalog):
        query = await build_resource_filter(db, branch="CSE", semester=1)
        assert query["subject_id"] == {"$in": [catalog["subjects"]["CS101"]]}

    async def test_subject_outside_branch_short_circuits(self, db, catalog):
        query = await build_resource_filter(
            db, branch="CSE", subject=str(catalog["subjects"]["EC101"])
        )
        assert query is None

    def test_sort_allow_list(self):
        assert sort_spec(ResourceSort.QUALITY_SCORE) == [("quality_score", -1), ("_id", -1)]
        assert sort_spec(ResourceSort.NAME) == [("title", 1), ("_id", -1)]
        assert sort_spec(ResourceSort.TITLE) == [("title", 1), ("_id", -1)]
        assert sort_spec(ResourceSort.CREATED_AT) == [("created_at", -1), ("_id", -1)]


class TestListResources:
    async def test_unknown_branch_returns_empty_page(self, client, catalog):
        response = await client.get("/api/v1/resources", params={"branch": "XX"})

        assert response.status_code == 200
        body = response.json()
        assert body["items"] == []
        assert body["total"] == 0
        assert body["pages"] == 0

    async def test_empty_branch_param_is_ignored(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        await make_resource(catalog["subjects"]["CS101"], owner["_id"])

        response = await client.get("/api/v1/resources", params={"branch": ""})

        assert response.json()["total"] == 1

    async def test_second_page(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        for _ in range(15):
            await make_resource(catalog["subjects"]["CS101"], owner["_id"])

        response = await client.get("/api/v1/resources", params={"page": 2, "limit": 10})

        body = response.json()
        assert len(body["items"]) == 5
        assert body["total"] == 15
        assert body["pages"] == 2
        assert body["page"] == 2

    async def test_unapproved_hidden_from_public(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        await make_resource(catalog["subjects"]["CS101"], owner["_id"], title="Visible")
        await make_resource(catalog["subjects"]["CS101"], owner["_id"], title="Hidden", is_approved=False)

        response = await client.get("/api/v1/resources", params={"include_unapproved": "true"})

        titles = [item["title"] for item in response.json()["items"]]
        assert titles == ["Visible"]

    async def test_moderator_can_include_unapproved(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        moderator = await make_user(role="moderator")
        await make_resource(catalog["subjects"]["CS101"], owner["_id"], is_approved=False)

        response = await client.get(
            "/api/v1/resources",
            params={"include_unapproved": "true"},
            headers=auth_headers(moderator)
        )

        assert response.json()["total"] == 1

    async def test_filters_by_semester(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        await make_resource(catalog["subjects"]["CS101"], owner["_id"], title="Sem one CSE")
        await make_resource(catalog["subjects"]["EC101"], owner["_id"], title="Sem one ECE")
        await make_resource(catalog["subjects"]["CS102"], owner["_id"], title="Sem two")

        response = await client.get("/api/v1/resources", params={"semester": 1, "sort": "title"})

        titles = [item["title"] for item in response.json()["items"]]
        assert titles == ["Sem one CSE", "Sem one ECE"]

    async def test_sort_by_quality(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        for score in (40, 90, 65):
            await make_resource(catalog["subjects"]["CS101"], owner["_id"], quality_score=score)

        response = await client.get("/api/v1/resources", params={"sort": "qualityScore"})

        scores = [item["quality_score"] for item in response.json()["items"]]
        assert scores == [90, 65, 40]

    async def test_items_carry_subject_and_author(self, client, catalog, make_user, make_resource):
        owner = await make_user(name="Asha")
        await make_resource(catalog["subjects"]["CS101"], owner["_id"])

        item = (await client.get("/api/v1/resources")).json()["items"][0]

        assert item["subject"]["code"] == "CS101"
        assert item["added_by_user"]["name"] == "Asha"
        assert item["subject_id"] == str(catalog["subjects"]["CS101"])

    @pytest.mark.parametrize("params", [
        {"sort": "password"},
        {"limit": 101},
        {"limit": 0},
        {"page": 0},
        {"type": "video"},
    ])
    async def test_rejects_bad_query(self, client, params):
        response = await client.get("/api/v1/resources", params=params)
        assert response.status_code == 400
        assert response.json()["detail"] == "Validation failed"


class TestResourceMutations:
    async def test_student_submission_is_pending(self, client, db, catalog, make_user):
        student = await make_user()

        response = await client.post(
            "/api/v1/resources",
            json={
                "type": "notes",
                "title": "My notes",
                "url": "https://example.com/notes.pdf",
                "subject_id": str(catalog["subjects"]["CS101"]),
                "is_approved": True,
                "quality_score": 100,
                "average_rating": 5,
            },
            headers=auth_headers(student)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["is_approved"] is False
        assert body["quality_score"] == 0
        assert body["average_rating"] == 0
        assert body["total_ratings"] == 0
        assert body["added_by_user"]["name"] == student["name"]

    async def test_moderator_may_publish_directly(self, client, catalog, make_user):
        moderator = await make_user(role="moderator")

        response = await client.post(
            "/api/v1/resources",
            json={
                "type": "book",
                "title": "Textbook",
                "url": "https://example.com/book",
                "subject_id": str(catalog["subjects"]["CS101"]),
                "is_approved": True,
                "quality_score": 80,
            },
            headers=auth_headers(moderator)
        )

        assert response.json()["is_approved"] is True
        assert response.json()["quality_score"] == 80

    async def test_unknown_subject_rejected(self, client, make_user, missing_id):
        student = await make_user()
        response = await client.post(
            "/api/v1/resources",
            json={"type": "notes", "title": "Orphan", "url": "https://example.com", "subject_id": missing_id},
            headers=auth_headers(student)
        )
        assert response.status_code == 400

    async def test_malformed_id_rejected(self, client):
        response = await client.get("/api/v1/resources/not-an-id")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid resource id"

    async def test_missing_resource(self, client, missing_id):
        response = await client.get(f"/api/v1/resources/{missing_id}")
        assert response.status_code == 404

    async def test_only_owner_or_staff_may_update(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        stranger = await make_user()
        moderator = await make_user(role="moderator")
        resource = await make_resource(catalog["subjects"]["CS101"], owner["_id"])
        url = f"/api/v1/resources/{resource['_id']}"

        forbidden = await client.put(url, json={"title": "Hijacked"}, headers=auth_headers(stranger))
        allowed = await client.put(url, json={"title": "Edited"}, headers=auth_headers(moderator))

        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["title"] == "Edited"

    async def test_owner_cannot_self_approve(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        resource = await make_resource(catalog["subjects"]["CS101"], owner["_id"], is_approved=False)

        response = await client.put(
            f"/api/v1/resources/{resource['_id']}",
            json={"is_approved": True, "description": "more detail"},
            headers=auth_headers(owner)
        )

        assert response.json()["is_approved"] is False
        assert response.json()["description"] == "more detail"

    async def test_delete_cascades_ratings(self, client, db, catalog, make_user, make_resource):
        owner = await make_user()
        resource = await make_resource(catalog["subjects"]["CS101"], owner["_id"])
        await db.ratings.insert_one({"resource_id": resource["_id"], "user_id": owner["_id"], "rating": 4})

        response = await client.delete(
            f"/api/v1/resources/{resource['_id']}", headers=auth_headers(owner)
        )

        assert response.status_code == 200
        assert await db.resources.count_documents({}) == 0
        assert await db.ratings.count_documents({}) == 0

    async def test_approve_requires_staff(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        moderator = await make_user(role="moderator")
        resource = await make_resource(catalog["subjects"]["CS101"], owner["_id"], is_approved=False)
        url = f"/api/v1/resources/{resource['_id']}/approve"

        denied = await client.patch(url, headers=auth_headers(owner))
        approved = await client.patch(url, headers=auth_headers(moderator))

        assert denied.status_code == 403
        assert approved.status_code == 200
        assert approved.json()["is_approved"] is True
