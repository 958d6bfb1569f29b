from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from syllabus_hub.database import get_db
from syllabus_hub.dependencies import UserContext, get_current_user
from syllabus_hub.pagination import PageParams, page_params
from syllabus_hub.resources import resource_service
from syllabus_hub.users import user_service as service
from syllabus_hub.users.user_models import UserProfileUpdate

router = APIRouter(prefix="/users", tags=["Users"])

@router.get("/me")
async def get_my_profile(
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.get_profile(db, user)

@router.patch("/me")
async def update_my_profile(
    data: UserProfileUpdate,
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.update_profile(db, user, data.model_dump(exclude_none=True))

@router.get("/me/resources")
async def get_my_resources(
    params: PageParams = Depends(page_params(20)),
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    """
    Everything the caller has submitted, including items awaiting approval
    """
    return await resource_service.list_user_resources(db, user.user_id, params)

@router.get("/me/stats")
async def get_my_stats(
    user: UserContext = Depends(get_current_user),
    db: AsyncIOMotorDatabase = Depends(get_db)
):
    return await service.get_contribution_stats(db, user)
