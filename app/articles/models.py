"""Article models."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from app.content.blocks import ContentBlock
from app.content.renderer import DisplayNode


# ============================================================================
# Request Schemas
# ============================================================================

class PublishArticleRequest(BaseModel):
    """Editor output plus title and optional cover."""
    title: str = Field(..., max_length=200)
    blocks: List[ContentBlock] = Field(default_factory=list)
    cover_image_id: Optional[str] = Field(None, max_length=512)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        return v.strip()


class InspireRequest(BaseModel):
    topic: str = Field(..., min_length=1, max_length=200)


class SetLikesRequest(BaseModel):
    """Full replacement liking set."""
    liked_by: List[str] = Field(default_factory=list)


class SetViewsRequest(BaseModel):
    views: int = Field(..., ge=0)


class CreateCommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        # Length limits apply to the stripped text.
        return v.strip() if isinstance(v, str) else v


# ============================================================================
# Response Schemas
# ============================================================================

class ArticleListItem(BaseModel):
    """Feed / profile card."""
    id: str
    title: str
    summary: str = ""
    user_id: str
    author_name: str
    author_avatar_url: Optional[str] = None
    tags: List[str] = []
    created_at: datetime
    cover_image_id: Optional[str] = None
    cover_url: Optional[str] = None
    views: int = 0
    like_count: int = 0
    read_time_minutes: int = 1


class ArticlesResponse(BaseModel):
    articles: List[ArticleListItem] = Field(default_factory=list)
    total: int = 0


class ArticleDetailResponse(BaseModel):
    id: str
    title: str
    content: str
    summary: str = ""
    user_id: str
    author_name: str
    tags: List[str] = []
    created_at: datetime
    cover_image_id: Optional[str] = None
    cover_url: Optional[str] = None
    views: int = 0
    liked_by: List[str] = []
    read_time_minutes: int = 1
    body: List[DisplayNode] = []


class LikesResponse(BaseModel):
    liked_by: List[str]


class ViewsResponse(BaseModel):
    views: int


class InspireResponse(BaseModel):
    text: str


class CategoriesResponse(BaseModel):
    categories: List[str]


class CommentResponse(BaseModel):
    id: str
    content: str
    article_id: str
    user_id: str
    author_name: str
    created_at: datetime


class CommentsListResponse(BaseModel):
    comments: List[CommentResponse]
    total: int
