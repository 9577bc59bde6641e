"""
Routes des utilisateurs et des abonnements.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...core.entities.social import User
from ...services import UserService
from ..deps import get_user_service

router = APIRouter(prefix="/users")


class UserIn(BaseModel):
    username: str
    email: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    role: str = "user"


@router.post("", status_code=201)
async def create_user(body: UserIn, service: UserService = Depends(get_user_service)):
    return await service.create(User(**body.model_dump()))


@router.get("/{user_id}")
async def get_user(user_id: str, service: UserService = Depends(get_user_service)):
    return await service.get(user_id)


@router.post("/{user_id}/follow/{follow_id}")
async def follow_user(
    user_id: str, follow_id: str, service: UserService = Depends(get_user_service)
):
    return await service.follow(user_id, follow_id)


@router.delete("/{user_id}/follow/{follow_id}")
async def unfollow_user(
    user_id: str, follow_id: str, service: UserService = Depends(get_user_service)
):
    return await service.unfollow(user_id, follow_id)


@router.get("/{user_id}/followers")
async def get_followers(user_id: str, service: UserService = Depends(get_user_service)):
    return await service.get_followers(user_id)


@router.get("/{user_id}/following")
async def get_following(user_id: str, service: UserService = Depends(get_user_service)):
    return await service.get_following(user_id)
