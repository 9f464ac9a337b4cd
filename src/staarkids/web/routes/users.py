"""User endpoints."""

import sqlite3

from fastapi import APIRouter, HTTPException, Query, status

from staarkids.db.users_repository import (
    generate_user_id,
    get_user,
    get_user_by_email,
    list_users,
    update_user_profile,
    upsert_user,
)
from staarkids.web.schemas import UserCreate, UserListResponse, UserResponse, UserUpdate

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_all_users(role: str | None = Query(default=None)) -> UserListResponse:
    """List users, optionally filtered by role."""
    users = [UserResponse(**u.to_dict()) for u in list_users(role)]
    return UserListResponse(users=users, count=len(users))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(body: UserCreate) -> UserResponse:
    """Create a user, or replace the one with the same ID."""
    user_id = body.user_id or generate_user_id()

    if body.email:
        owner = get_user_by_email(body.email)
        if owner is not None and owner.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Email '{body.email}' already in use",
            )

    try:
        user = upsert_user(
            user_id,
            email=body.email,
            first_name=body.first_name,
            last_name=body.last_name,
            current_grade=body.current_grade,
            role=body.role,
        )
    except sqlite3.IntegrityError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )

    return UserResponse(**user.to_dict())


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_by_id(user_id: str) -> UserResponse:
    """Get a specific user by ID."""
    user = get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found",
        )
    return UserResponse(**user.to_dict())


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, body: UserUpdate) -> UserResponse:
    """Update grade, role or name of a user."""
    user = update_user_profile(
        user_id,
        current_grade=body.current_grade,
        role=body.role,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User '{user_id}' not found",
        )
    return UserResponse(**user.to_dict())
