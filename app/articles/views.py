"""Articles API routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.ai.enrichment import EnrichmentClient, get_enrichment_client
from app.articles.models import (
    ArticleDetailResponse,
    ArticlesResponse,
    CategoriesResponse,
    CommentResponse,
    CommentsListResponse,
    CreateCommentRequest,
    InspireRequest,
    InspireResponse,
    LikesResponse,
    PublishArticleRequest,
    SetLikesRequest,
    SetViewsRequest,
    ViewsResponse,
)
from app.articles.repository import ArticleRepository, get_article_repository
from app.articles.service import CATEGORIES, PublishService, filter_feed, to_detail, to_list_item
from app.core.dependencies import get_current_user


router = APIRouter(prefix="/articles", tags=["Articles"])


@router.get("/categories", response_model=CategoriesResponse)
async def list_categories():
    """Home feed categories."""
    return CategoriesResponse(categories=CATEGORIES)


@router.get("", response_model=ArticlesResponse)
async def list_articles(
    category: Optional[str] = Query(None, description="Keep articles tagged with this category"),
    q: Optional[str] = Query(None, description="Search title and summary"),
    limit: int = Query(50, ge=1, le=100),
    repo: ArticleRepository = Depends(get_article_repository),
):
    """
    Home feed, newest first.

    Falls back to storage order when the database cannot sort.
    """
    docs = await repo.list_articles(limit=limit)
    docs = filter_feed(docs, category=category, search=q)
    return ArticlesResponse(articles=[to_list_item(d) for d in docs], total=len(docs))


@router.post("", response_model=ArticleDetailResponse, status_code=status.HTTP_201_CREATED)
async def publish_article(
    request: PublishArticleRequest,
    current_user: dict = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repository),
    enrichment: EnrichmentClient = Depends(get_enrichment_client),
):
    """
    Publish editor output.

    Summary and tags are AI-generated, with local fallbacks when the AI
    service is unavailable.
    """
    article = await PublishService(repo, enrichment).publish(current_user, request)
    return to_detail(article)


@router.post("/inspire", response_model=InspireResponse)
async def inspire(
    request: InspireRequest,
    current_user: dict = Depends(get_current_user),
    enrichment: EnrichmentClient = Depends(get_enrichment_client),
):
    """Draft an opening paragraph for a topic."""
    return InspireResponse(text=await enrichment.inspire(request.topic))


@router.get("/{article_id}", response_model=ArticleDetailResponse)
async def get_article(
    article_id: str,
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Full article with its content rendered to display nodes."""
    return to_detail(await repo.get_article(article_id))


@router.put("/{article_id}/likes", response_model=LikesResponse)
async def set_likes(
    article_id: str,
    request: SetLikesRequest,
    current_user: dict = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Replace the liking set with the one computed by the client."""
    liked_by = await repo.set_liked_by(article_id, request.liked_by)
    return LikesResponse(liked_by=liked_by)


@router.put("/{article_id}/views", response_model=ViewsResponse)
async def set_views(
    article_id: str,
    request: SetViewsRequest,
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Store the view count observed by the client plus one."""
    views = await repo.set_views(article_id, request.views)
    return ViewsResponse(views=views)


@router.get("/{article_id}/comments", response_model=CommentsListResponse)
async def list_comments(
    article_id: str,
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Comments on an article, newest first."""
    comments = await repo.list_comments(article_id)
    return CommentsListResponse(
        comments=[CommentResponse(**c) for c in comments],
        total=len(comments),
    )


@router.post("/{article_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    article_id: str,
    request: CreateCommentRequest,
    current_user: dict = Depends(get_current_user),
    repo: ArticleRepository = Depends(get_article_repository),
):
    """Add a comment as the current user."""
    comment = await repo.create_comment(
        article_id=article_id,
        user_id=current_user["id"],
        author_name=current_user.get("name") or current_user["email"],
        content=request.content,
    )
    return CommentResponse(**comment)
