from datetime import datetime

from bson import ObjectId

from syllabus_hub.ratings.aggregation import compute_aggregate, recompute_resource_rating


class TestComputeAggregate:
    def test_no_ratings_resets_everything(self):
        result = compute_aggregate([])
        assert result == {
            "average_rating": 0,
            "total_ratings": 0,
            "rating_distribution": {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0},
        }

    def test_mean_and_distribution(self):
        result = compute_aggregate([4, 5, 5])
        assert result["average_rating"] == 4.7
        assert result["total_ratings"] == 3
        assert result["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 2}

    def test_rounds_half_up(self):
        # 9 / 4 = 2.25 -> 2.3 (banker's rounding would give 2.2)
        assert compute_aggregate([1, 2, 3, 3])["average_rating"] == 2.3

    def test_distribution_sums_to_total(self):
        values = [1, 2, 2, 3, 5, 5, 5, 4]
        result = compute_aggregate(values)
        assert sum(result["rating_distribution"].values()) == result["total_ratings"] == len(values)


async def _insert_ratings(db, resource_id, values):
    for value in values:
        await db.ratings.insert_one({
            "resource_id": resource_id,
            "user_id": ObjectId(),
            "rating": value,
            "created_at": datetime.utcnow(),
        })


class TestRecompute:
    async def test_writes_aggregate_to_resource(self, db):
        resource_id = (await db.resources.insert_one({"title": "r"})).inserted_id
        await _insert_ratings(db, resource_id, [3, 4])

        await recompute_resource_rating(db, resource_id)

        resource = await db.resources.find_one({"_id": resource_id})
        assert resource["average_rating"] == 3.5
        assert resource["total_ratings"] == 2
        assert resource["rating_distribution"]["3"] == 1
        assert resource["rating_distribution"]["4"] == 1

    async def test_accepts_string_id(self, db):
        resource_id = (await db.resources.insert_one({"title": "r"})).inserted_id
        await _insert_ratings(db, resource_id, [5])

        await recompute_resource_rating(db, str(resource_id))

        resource = await db.resources.find_one({"_id": resource_id})
        assert resource["average_rating"] == 5.0

    async def test_missing_resource_is_noop(self, db):
        resource_id = ObjectId()
        await _insert_ratings(db, resource_id, [2])

        await recompute_resource_rating(db, resource_id)

        assert await db.resources.count_documents({}) == 0

    async def test_failures_are_swallowed(self):
        class BrokenCollection:
            def find(self, *args, **kwargs):
                raise RuntimeError("connection lost")

        class BrokenDB:
            ratings = BrokenCollection()

        await recompute_resource_rating(BrokenDB(), ObjectId())

    async def test_rerun_repairs_stale_aggregate(self, db):
        resource_id = (await db.resources.insert_one({
            "title": "r", "average_rating": 1.0, "total_ratings": 9
        })).inserted_id
        await _insert_ratings(db, resource_id, [5, 5])

        await recompute_resource_rating(db, resource_id)

        resource = await db.resources.find_one({"_id": resource_id})
        assert resource["total_ratings"] == 2
        assert resource["average_rating"] == 5.0
