"""Profile and follow models."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.articles.models import ArticleListItem


class FollowRequest(BaseModel):
    following_id: str = Field(..., min_length=1)


class FollowResponse(BaseModel):
    id: str
    follower_id: str
    following_id: str
    created_at: datetime
    created: bool = True  # False when the edge already existed


class FollowStatusResponse(BaseModel):
    following: bool
    follow_id: Optional[str] = None
    follower_count: int = 0
    following_count: int = 0


class PublicUser(BaseModel):
    id: str
    name: str
    avatar: Optional[str] = None
    created_at: datetime


class ProfileResponse(BaseModel):
    user: PublicUser
    articles: List[ArticleListItem] = Field(default_factory=list)
    follower_count: int = 0
    following_count: int = 0
