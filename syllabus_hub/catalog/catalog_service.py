from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import serialize_doc, serialize_many, to_object_id
from syllabus_hub.errors import NotFoundError


# ==================== SUBJECT RESOLUTION ====================

async def resolve_subject_ids(
    db: AsyncIOMotorDatabase,
    branch_code: Optional[str] = None,
    semester_number: Optional[int] = None
) -> Optional[List]:
    """
    Translate a branch code and/or semester number into subject ids.

    Returns None when neither constraint is given (an empty branch code
    counts as none), and an empty list when the branch or semester does not
    exist or no subject matches both.
    """
    if not branch_code and semester_number is None:
        return None

    subject_filter = {}

    if branch_code:
        branch = await db.branches.find_one({"code": branch_code}, {"_id": 1})
        if not branch:
            return []
        subject_filter["branch_id"] = branch["_id"]

    if semester_number is not None:
        semesters = await db.semesters.find(
            {"number": semester_number}, {"_id": 1}
        ).to_list(length=None)
        if not semesters:
            return []
        subject_filter["semester_id"] = {"$in": [s["_id"] for s in semesters]}

    subjects = await db.subjects.find(subject_filter, {"_id": 1}).to_list(length=None)
    return [s["_id"] for s in subjects]


# ==================== LISTINGS ====================

async def list_branches(db: AsyncIOMotorDatabase) -> List[dict]:
    branches = await db.branches.find().sort("code", 1).to_list(length=None)
    return serialize_many(branches)


async def list_programs(db: AsyncIOMotorDatabase) -> List[dict]:
    """All programs with their branch summary"""
    programs = await db.programs.find().sort("name", 1).to_list(length=None)
    branches = await db.branches.find(
        {"_id": {"$in": [p.get("branch_id") for p in programs]}},
        {"code": 1, "name": 1}
    ).to_list(length=None)
    by_id = {b["_id"]: b for b in branches}
    for program in programs:
        program["branch"] = by_id.get(program.get("branch_id"))
    return serialize_many(programs)


async def list_branch_programs(db: AsyncIOMotorDatabase, branch_id: str) -> List[dict]:
    programs = await db.programs.find(
        {"branch_id": to_object_id(branch_id, "branch id")}
    ).sort("name", 1).to_list(length=None)
    return serialize_many(programs)


async def list_program_years(db: AsyncIOMotorDatabase, program_id: str) -> List[dict]:
    years = await db.years.find(
        {"program_id": to_object_id(program_id, "program id")}
    ).sort("year", 1).to_list(length=None)
    return serialize_many(years)


async def list_year_semesters(db: AsyncIOMotorDatabase, year_id: str) -> List[dict]:
    semesters = await db.semesters.find(
        {"year_id": to_object_id(year_id, "year id")}
    ).sort("number", 1).to_list(length=None)
    return serialize_many(semesters)


async def list_semester_subjects(db: AsyncIOMotorDatabase, semester_id: str) -> List[dict]:
    subjects = await db.subjects.find(
        {"semester_id": to_object_id(semester_id, "semester id")}
    ).sort("code", 1).to_list(length=None)
    return serialize_many(subjects)


# ==================== STRUCTURE ====================

def _group(docs: List[dict], parent_field: str) -> dict:
    grouped = {}
    for doc in docs:
        grouped.setdefault(doc.get(parent_field), []).append(doc)
    return grouped


async def get_catalog_structure(db: AsyncIOMotorDatabase) -> List[dict]:
    """
    Full Branch -> Program -> Year -> Semester -> Subject tree.

    Every collection is read once and assembled in memory. Children whose
    parent is missing are left out of the tree.
    """
    branches = await db.branches.find().sort("code", 1).to_list(length=None)
    programs = await db.programs.find().sort("name", 1).to_list(length=None)
    years = await db.years.find().sort("year", 1).to_list(length=None)
    semesters = await db.semesters.find().sort("number", 1).to_list(length=None)
    subjects = await db.subjects.find().sort("code", 1).to_list(length=None)

    programs_by_branch = _group(programs, "branch_id")
    years_by_program = _group(years, "program_id")
    semesters_by_year = _group(semesters, "year_id")
    subjects_by_semester = _group(subjects, "semester_id")

    tree = []
    for branch in branches:
        branch_node = {**branch, "programs": []}
        for program in programs_by_branch.get(branch["_id"], []):
            program_node = {**program, "years": []}
            for year in years_by_program.get(program["_id"], []):
                year_node = {**year, "semesters": []}
                for semester in semesters_by_year.get(year["_id"], []):
                    year_node["semesters"].append({
                        **semester,
                        "subjects": subjects_by_semester.get(semester["_id"], [])
                    })
                program_node["years"].append(year_node)
            branch_node["programs"].append(program_node)
        tree.append(branch_node)

    return serialize_doc(tree)


# ==================== SUBJECTS ====================

async def get_subject_by_code(db: AsyncIOMotorDatabase, code: str) -> dict:
    """Subject with its branch and semester summaries"""
    subject = await db.subjects.find_one({"code": code})
    if not subject:
        raise NotFoundError("Subject not found")

    subject["branch"] = await db.branches.find_one(
        {"_id": subject.get("branch_id")}, {"code": 1, "name": 1}
    )
    subject["semester"] = await db.semesters.find_one(
        {"_id": subject.get("semester_id")}, {"number": 1}
    )
    return serialize_doc(subject)
