"""
Rating aggregate maintenance.

A resource's average_rating, total_ratings and rating_distribution are a
cache over its ratings. They are always recomputed from scratch, so running
the routine again after a crash or a lost race restores correct values.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import to_object_id
from syllabus_hub.logging_config import get_logger
from syllabus_hub.resources.resource_models import RATING_BUCKETS, empty_distribution

logger = get_logger("ratings.aggregation")


def round_half_up(value: Decimal, places: str = "0.1") -> float:
    return float(value.quantize(Decimal(places), rounding=ROUND_HALF_UP))


def compute_aggregate(values: Iterable[int]) -> dict:
    """Average (1 decimal, half-up), count and per-star distribution"""
    values = list(values)
    distribution = empty_distribution()
    if not values:
        return {"average_rating": 0, "total_ratings": 0, "rating_distribution": distribution}

    for value in values:
        bucket = str(value)
        if bucket in RATING_BUCKETS:
            distribution[bucket] += 1

    mean = Decimal(sum(values)) / Decimal(len(values))
    return {
        "average_rating": round_half_up(mean),
        "total_ratings": len(values),
        "rating_distribution": distribution,
    }


async def recompute_resource_rating(db: AsyncIOMotorDatabase, resource_id) -> None:
    """
    Rewrite the resource's aggregate from its current ratings.
    Failures are logged and swallowed; the triggering write has already
    succeeded and the next recompute repairs the cache.
    """
    try:
        oid = to_object_id(resource_id, "resource id")
        ratings = await db.ratings.find(
            {"resource_id": oid}, {"rating": 1}
        ).to_list(length=None)
        aggregate = compute_aggregate(r["rating"] for r in ratings)

        # A deleted resource matches nothing and the update is a no-op
        await db.resources.update_one({"_id": oid}, {"$set": aggregate})
    except Exception:
        logger.exception("Failed to update rating aggregate for resource %s", resource_id)
