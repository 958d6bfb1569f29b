"""
Sample data loader.

    python -m syllabus_hub.seed

Every record is upserted on its natural key, so running the loader twice
leaves the database unchanged.
"""
import asyncio
import os

from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub import config
from syllabus_hub.auth.auth_service import hash_password
from syllabus_hub.database import close_client, create_indexes, get_db, utcnow
from syllabus_hub.logging_config import get_logger, setup_logging
from syllabus_hub.ratings.aggregation import recompute_resource_rating
from syllabus_hub.resources.resource_models import empty_distribution
from syllabus_hub.roadmaps.roadmap_models import total_hours

logger = get_logger("seed")

USERS = [
    ("Campus Admin", "admin@campussyllabus.com", "admin"),
    ("Campus Moderator", "moderator@campussyllabus.com", "moderator"),
    ("Sample Student", "student@campussyllabus.com", "student"),
]

BRANCHES = [
    ("CSE", "Computer Science & Engineering"),
    ("ECE", "Electronics & Communication Engineering"),
    ("ME", "Mechanical Engineering"),
]

# (code, name, branch, semester number, credits, topics)
SUBJECTS = [
    ("CS101", "Programming in C", "CSE", 1, 4, ["Basics", "Loops", "Functions"]),
    ("CS102", "Data Structures", "CSE", 3, 4, ["Arrays", "Linked Lists", "Trees"]),
    ("CS201", "Algorithms", "CSE", 4, 4, ["Sorting", "Searching", "Graph Algorithms"]),
    ("ECE101", "Basic Electronics", "ECE", 1, 4, ["Diodes", "Transistors"]),
    ("ME101", "Engineering Mechanics", "ME", 1, 4, ["Statics", "Dynamics"]),
]

# (title, type, url, provider, subject code, quality score, tags)
RESOURCES = [
    ("NPTEL C Programming", "lecture", "https://nptel.ac.in/courses/106105085",
     "NPTEL", "CS101", 90, ["video", "nptel", "c-programming"]),
    ("Data Structures Playlist", "lecture",
     "https://www.youtube.com/playlist?list=PLxCzCOWd7aiEwaANNt3OqJPVIxwp2ebiT",
     "Gate Smashers", "CS102", 85, ["video", "data-structures"]),
    ("Introduction to Algorithms", "book", "https://mitpress.mit.edu/9780262046305/",
     "MIT Press", "CS201", 95, ["book", "clrs"]),
    ("Basic Electronics Notes", "notes", "https://example.edu/notes/ece101.pdf",
     "Faculty", "ECE101", 70, ["notes"]),
]


async def _upsert(collection, key: dict, values: dict):
    update = {"$setOnInsert": values} if values else {"$set": key}
    await collection.update_one(key, update, upsert=True)
    return (await collection.find_one(key, {"_id": 1}))["_id"]


async def seed_database(db: AsyncIOMotorDatabase) -> dict:
    """Load the sample catalog, users, resources and one roadmap"""
    password = os.getenv("SEED_PASSWORD", "ChangeMe@123")
    now = utcnow()

    users = {}
    for name, email, role in USERS:
        users[role] = await _upsert(db.users, {"email": email}, {
            "name": name,
            "password_hash": hash_password(password),
            "role": role,
            "is_email_verified": True,
            "created_at": now,
            "updated_at": now,
        })

    branches, semesters = {}, {}
    for code, name in BRANCHES:
        branch_id = await _upsert(db.branches, {"code": code}, {"name": name})
        branches[code] = branch_id
        program_id = await _upsert(db.programs, {"code": f"BTECH-{code}"}, {
            "name": f"B.Tech {code}",
            "branch_id": branch_id,
            "duration_years": 4,
        })
        for year in range(1, 5):
            year_id = await _upsert(db.years, {"program_id": program_id, "year": year}, {})
            for number in (2 * year - 1, 2 * year):
                semesters[(code, number)] = await _upsert(
                    db.semesters, {"year_id": year_id, "number": number}, {}
                )

    subjects = {}
    for code, name, branch, number, credits, topics in SUBJECTS:
        subjects[code] = await _upsert(db.subjects, {"code": code}, {
            "name": name,
            "branch_id": branches[branch],
            "semester_id": semesters[(branch, number)],
            "credits": credits,
            "topics": topics,
        })

    resource_ids = []
    for title, type_, url, provider, subject, quality, tags in RESOURCES:
        resource_id = await _upsert(db.resources, {"url": url}, {
            "type": type_,
            "title": title,
            "description": f"{title} for {subject}",
            "provider": provider,
            "subject_id": subjects[subject],
            "topics": [],
            "tags": tags,
            "prerequisites": [],
            "added_by": users["admin"],
            "is_approved": True,
            "quality_score": quality,
            "average_rating": 0,
            "total_ratings": 0,
            "rating_distribution": empty_distribution(),
            "created_at": now,
            "updated_at": now,
        })
        resource_ids.append(resource_id)

    sample_rating = {"resource_id": resource_ids[0], "user_id": users["student"]}
    await _upsert(db.ratings, sample_rating, {
        "rating": 5,
        "review": "Clear and well paced.",
        "helpful_votes": 0,
        "reported_count": 0,
        "is_verified": False,
        "created_at": now,
        "updated_at": now,
    })
    await recompute_resource_rating(db, resource_ids[0])

    steps = [
        {"title": "Learn the syntax", "description": "Variables, types and control flow",
         "order": 1, "estimated_hours": 6, "prerequisites": [], "resources": [resource_ids[0]]},
        {"title": "Practice problems", "description": "Solve twenty short exercises",
         "order": 2, "estimated_hours": 8, "prerequisites": ["Learn the syntax"], "resources": []},
    ]
    await _upsert(db.roadmaps, {"subject_id": subjects["CS101"], "title": "C Programming Midsem Plan"}, {
        "type": "midsem",
        "description": "Two-week preparation plan for the CS101 midsem",
        "difficulty": "beginner",
        "steps": steps,
        "total_estimated_hours": total_hours(steps),
        "created_by": users["moderator"],
        "is_public": True,
        "is_approved": True,
        "tags": ["c", "midsem"],
        "created_at": now,
        "updated_at": now,
    })

    counts = {
        name: await db[name].count_documents({})
        for name in ("users", "branches", "programs", "years", "semesters",
                     "subjects", "resources", "ratings", "roadmaps")
    }
    logger.info("Seed complete: %s", counts)
    return counts


async def main():
    config.validate_settings()
    db = await get_db()
    await create_indexes(db)
    await seed_database(db)
    close_client()


if __name__ == "__main__":
    setup_logging(level=config.LOG_LEVEL, production=config.LOG_JSON)
    asyncio.run(main())
