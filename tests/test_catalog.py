from bson import ObjectId

from syllabus_hub.catalog.catalog_service import get_catalog_structure, resolve_subject_ids


class TestStructure:
    async def test_nested_tree_sorted_at_every_level(self, db, catalog):
        tree = await get_catalog_structure(db)

        assert [b["code"] for b in tree] == ["CSE", "ECE"]
        cse = tree[0]
        assert [p["name"] for p in cse["programs"]] == ["B.Tech CSE"]
        semesters = cse["programs"][0]["years"][0]["semesters"]
        assert [s["number"] for s in semesters] == [1, 2]
        assert [s["code"] for s in semesters[0]["subjects"]] == ["CS101"]
        assert isinstance(cse["_id"], str)

    async def test_programs_and_years_sorted(self, db, catalog):
        cse = catalog["branches"]["CSE"]
        program = await db.programs.find_one({"code": "BT-CSE"})
        await db.years.insert_one({"year": 3, "program_id": program["_id"]})
        await db.years.insert_one({"year": 2, "program_id": program["_id"]})
        await db.programs.insert_one({"code": "AS-CSE", "name": "Applied CSE", "branch_id": cse})

        tree = await get_catalog_structure(db)

        programs = tree[0]["programs"]
        assert [p["name"] for p in programs] == ["Applied CSE", "B.Tech CSE"]
        assert [y["year"] for y in programs[1]["years"]] == [1, 2, 3]

    async def test_empty_program_has_empty_years(self, db, catalog):
        await db.programs.insert_one({
            "code": "MT-CSE", "name": "M.Tech CSE",
            "branch_id": catalog["branches"]["CSE"], "duration_years": 2
        })

        tree = await get_catalog_structure(db)

        mtech = next(p for p in tree[0]["programs"] if p["code"] == "MT-CSE")
        assert mtech["years"] == []

    async def test_empty_catalog(self, db):
        assert await get_catalog_structure(db) == []

    async def test_dangling_children_are_omitted(self, db, catalog):
        await db.programs.insert_one({"code": "GHOST", "name": "Ghost", "branch_id": ObjectId()})

        tree = await get_catalog_structure(db)

        codes = [p["code"] for branch in tree for p in branch["programs"]]
        assert "GHOST" not in codes

    async def test_structure_endpoint(self, client, catalog):
        response = await client.get("/api/v1/catalog/structure")
        assert response.status_code == 200
        assert len(response.json()) == 2


class TestSubjectResolution:
    async def test_no_constraints(self, db, catalog):
        assert await resolve_subject_ids(db) is None

    async def test_branch_only(self, db, catalog):
        ids = await resolve_subject_ids(db, branch_code="CSE")
        assert set(ids) == {catalog["subjects"]["CS101"], catalog["subjects"]["CS102"]}

    async def test_branch_without_subjects(self, db, catalog):
        await db.branches.insert_one({"code": "ME", "name": "Mechanical"})
        assert await resolve_subject_ids(db, branch_code="ME") == []

    async def test_empty_branch_code_is_no_constraint(self, db, catalog):
        assert await resolve_subject_ids(db, branch_code="") is None


class TestCatalogEndpoints:
    async def test_branches_sorted_by_code(self, client, catalog):
        response = await client.get("/api/v1/catalog/branches")
        assert [b["code"] for b in response.json()] == ["CSE", "ECE"]

    async def test_programs_include_branch(self, client, catalog):
        programs = (await client.get("/api/v1/catalog/programs")).json()
        assert programs[0]["branch"]["code"] == "CSE"

    async def test_drill_down(self, client, catalog):
        branch_id = str(catalog["branches"]["CSE"])
        programs = (await client.get(f"/api/v1/catalog/branches/{branch_id}/programs")).json()
        years = (await client.get(f"/api/v1/catalog/programs/{programs[0]['_id']}/years")).json()
        semesters = (await client.get(f"/api/v1/catalog/years/{years[0]['_id']}/semesters")).json()
        subjects = (await client.get(f"/api/v1/catalog/semesters/{semesters[1]['_id']}/subjects")).json()

        assert [y["year"] for y in years] == [1]
        assert [s["code"] for s in subjects] == ["CS102"]

    async def test_invalid_branch_id(self, client):
        response = await client.get("/api/v1/catalog/branches/xyz/programs")
        assert response.status_code == 400


class TestSubjects:
    async def test_subject_detail(self, client, catalog):
        response = await client.get("/api/v1/subjects/CS102")

        body = response.json()
        assert body["name"] == "Data Structures"
        assert body["branch"]["code"] == "CSE"
        assert body["semester"]["number"] == 2

    async def test_unknown_subject(self, client):
        response = await client.get("/api/v1/subjects/NOPE")
        assert response.status_code == 404
        assert response.json()["detail"] == "Subject not found"

    async def test_subject_resources_only_approved(self, client, catalog, make_user, make_resource):
        owner = await make_user()
        await make_resource(catalog["subjects"]["CS101"], owner["_id"], title="Approved")
        await make_resource(catalog["subjects"]["CS101"], owner["_id"], is_approved=False)
        await make_resource(catalog["subjects"]["CS102"], owner["_id"])

        response = await client.get("/api/v1/subjects/CS101/resources")

        body = response.json()
        assert body["total"] == 1
        assert body["items"][0]["title"] == "Approved"
