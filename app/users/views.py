"""Profiles and follow edges."""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from app.articles.repository import ArticleRepository, get_article_repository
from app.articles.service import to_list_item
from app.auth.service import AuthService, get_auth_service
from app.core.dependencies import get_current_user, get_current_user_optional
from app.core.exceptions import BadRequestException
from app.users.models import (
    FollowRequest,
    FollowResponse,
    FollowStatusResponse,
    ProfileResponse,
    PublicUser,
)

router = APIRouter(tags=["Users"])


@router.get("/users/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    auth: AuthService = Depends(get_auth_service),
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Public profile with the user's published articles."""
    user = await auth.get_public_user(user_id)
    articles = await repo.list_user_articles(user_id)
    return ProfileResponse(
        user=PublicUser(**user),
        articles=[to_list_item(a) for a in articles],
        follower_count=await repo.count_followers(user_id),
        following_count=await repo.count_following(user_id),
    )


@router.get("/users/{user_id}/follow-status", response_model=FollowStatusResponse)
async def follow_status(
    user_id: str,
    current_user: Optional[dict] = Depends(get_current_user_optional),
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Whether the caller follows `user_id`, plus counts."""
    edge = None
    if current_user and current_user["id"] != user_id:
        edge = await repo.find_follow(current_user["id"], user_id)
    return FollowStatusResponse(
        following=edge is not None,
        follow_id=edge["id"] if edge else None,
        follower_count=await repo.count_followers(user_id),
        following_count=await repo.count_following(user_id),
    )


@router.post("/follows", response_model=FollowResponse)
async def follow(
    request: FollowRequest,
    response: Response,
    current_user: dict = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repository),
):
    """
    Follow a user.

    Returns the existing edge (200) when already following, otherwise the
    new one (201).
    """
    if request.following_id == current_user["id"]:
        raise BadRequestException("You cannot follow yourself")
    edge, created = await repo.create_follow(current_user["id"], request.following_id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return FollowResponse(**edge, created=created)


@router.delete("/follows/{follow_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow(
    follow_id: str,
    current_user: dict = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Remove one of the caller's follow edges."""
    await repo.delete_follow(follow_id, current_user["id"])
    return Response(status_code=status.HTTP_204_NO_CONTENT)
