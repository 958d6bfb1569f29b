from syllabus_hub.seed import seed_database


async def test_seed_is_idempotent(db):
    first = await seed_database(db)
    second = await seed_database(db)

    assert first == second
    assert first["users"] == 3
    assert first["branches"] == 3
    assert first["semesters"] == 24
    assert first["roadmaps"] == 1


async def test_seeded_aggregate_and_roadmap(db):
    await seed_database(db)

    rated = await db.resources.find_one({"title": "NPTEL C Programming"})
    roadmap = await db.roadmaps.find_one({})

    assert rated["total_ratings"] == 1
    assert rated["average_rating"] == 5.0
    assert roadmap["total_estimated_hours"] == 14


async def test_seeded_catalog_is_browsable(client, db):
    await seed_database(db)

    body = (await client.get("/api/v1/resources", params={"branch": "CSE", "semester": 3})).json()

    assert [item["title"] for item in body["items"]] == ["Data Structures Playlist"]
