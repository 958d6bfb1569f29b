from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.catalog import catalog_service as service
from syllabus_hub.database import get_db

router = APIRouter(prefix="/catalog", tags=["Catalog"])

# ==================== HIERARCHY ====================

@router.get("/branches")
async def list_branches(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_branches(db)

@router.get("/programs")
async def list_programs(db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_programs(db)

@router.get("/branches/{branch_id}/programs")
async def list_branch_programs(branch_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_branch_programs(db, branch_id)

@router.get("/programs/{program_id}/years")
async def list_program_years(program_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_program_years(db, program_id)

@router.get("/years/{year_id}/semesters")
async def list_year_semesters(year_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_year_semesters(db, year_id)

@router.get("/semesters/{semester_id}/subjects")
async def list_semester_subjects(semester_id: str, db: AsyncIOMotorDatabase = Depends(get_db)):
    return await service.list_semester_subjects(db, semester_id)

@router.get("/structure")
async def get_catalog_structure(db: AsyncIOMotorDatabase = Depends(get_db)):
    """
    Whole catalog as a nested tree (branches > programs > years > semesters > subjects)
    """
    return await service.get_catalog_structure(db)
