from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from online_judge.business.services import UserService, get_user_service
from online_judge.config import logger
from online_judge.data.repositories import get_session
from online_judge.data.schemas import ApiResponse, UserUpdateModel
from online_judge.presentation.responses import unwrap

users_logger = logger.getChild("auth.users")
users_router = APIRouter(prefix="/users", tags=["users"])


@users_router.get(
    "/{user_id}",
    response_model=ApiResponse,
    summary="Get user detail",
)
async def get_user_detail(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    users_logger.debug(f"Fetching detail for user ID: {user_id}")
    return unwrap(await user_service.get_detail(session, user_id))


@users_router.delete(
    "/{user_id}",
    response_model=ApiResponse,
    summary="Delete a user",
)
async def delete_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    users_logger.info(f"Deleting user ID: {user_id}")
    return unwrap(await user_service.delete(session, user_id))


@users_router.put(
    "/{user_id}",
    response_model=ApiResponse,
    summary="Update email and/or password",
    description="An empty field is left unchanged; a new email requires its verification code.",
)
async def update_user_detail(
    user_id: int,
    update_data: UserUpdateModel,
    user_service: UserService = Depends(get_user_service),
    session: AsyncSession = Depends(get_session),
):
    users_logger.info(f"Updating user ID: {user_id}")
    result = await user_service.update_detail(
        session, user_id, update_data.email, update_data.password, update_data.code
    )
    return unwrap(result)
