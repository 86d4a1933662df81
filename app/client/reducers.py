"""
Local state for likes, follows, views and comments.

Each action updates the local state first and confirms with the API
afterwards; a failed confirmation snaps the state back (see optimistic.py).
The `client` argument is anything with PediumClient's coroutine methods.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from app.client.optimistic import OptimisticUpdate
from app.client.viewed import ViewedSet

logger = logging.getLogger(__name__)


@dataclass
class ArticleState:
    """What an article page holds locally."""
    article_id: str
    liked_by: List[str] = field(default_factory=list)
    views: int = 0
    comments: List[dict] = field(default_factory=list)

    @classmethod
    def from_article(cls, article: dict, comments: Optional[List[dict]] = None) -> "ArticleState":
        return cls(
            article_id=article["id"],
            liked_by=list(article.get("liked_by") or []),
            views=int(article.get("views") or 0),
            comments=list(comments or []),
        )

    def is_liked_by(self, user_id: str) -> bool:
        return user_id in self.liked_by


@dataclass
class FollowState:
    """Follow button + follower count on a profile."""
    user_id: str
    following: bool = False
    follow_id: Optional[str] = None
    follower_count: int = 0

    @classmethod
    def from_status(cls, user_id: str, status: dict) -> "FollowState":
        return cls(
            user_id=user_id,
            following=bool(status.get("following")),
            follow_id=status.get("follow_id"),
            follower_count=int(status.get("follower_count") or 0),
        )


def with_like(liked_by: List[str], user_id: str, liked: bool) -> List[str]:
    """The liking set with `user_id` present (liked) or absent."""
    without = [u for u in liked_by if u != user_id]
    return without + [user_id] if liked else without


def toggled_likes(liked_by: List[str], user_id: str) -> List[str]:
    """Symmetric difference of the liking set with {user_id}."""
    return with_like(liked_by, user_id, user_id not in liked_by)


async def toggle_like(client, state: ArticleState, user_id: str) -> bool:
    """Like/unlike; sends the whole new set. Returns False if reverted."""
    new_set = toggled_likes(state.liked_by, user_id)
    update = OptimisticUpdate(state, ["liked_by"], label="like toggle")
    update.apply(lambda s: setattr(s, "liked_by", new_set))
    return await update.commit_or_revert(lambda: client.set_likes(state.article_id, new_set))


async def toggle_follow(client, state: FollowState) -> bool:
    """Follow/unfollow with an optimistic ±1 on the follower count."""
    update = OptimisticUpdate(state, ["following", "follow_id", "follower_count"], label="follow toggle")

    if state.following:
        follow_id = state.follow_id

        def unfollow(s: FollowState):
            s.following = False
            s.follow_id = None
            s.follower_count = max(0, s.follower_count - 1)

        async def remote():
            if not follow_id:
                raise ValueError("No follow edge to remove")
            await client.unfollow(follow_id)

        update.apply(unfollow)
        return await update.commit_or_revert(remote)

    def follow(s: FollowState):
        s.following = True
        s.follower_count += 1

    update.apply(follow)
    ok = await update.commit_or_revert(lambda: client.follow(state.user_id))
    if ok:
        state.follow_id = update.result["id"]
    return ok


async def record_view(client, state: ArticleState, viewed: ViewedSet) -> bool:
    """
    Count one view per device.

    Writes (server-observed count + 1), not an atomic increment, so two
    concurrent viewers can both write the same value. Returns True when a
    view was counted.
    """
    if state.article_id in viewed:
        return False

    observed = state.views
    try:
        await client.set_views(state.article_id, observed + 1)
    except Exception as e:
        logger.warning(f"View increment for {state.article_id} failed: {e}")
        return False

    viewed.add(state.article_id)
    state.views = observed + 1
    return True


def placeholder_comment(article_id: str, user: dict, content: str) -> dict:
    return {
        "id": f"temp-{uuid.uuid4()}",
        "content": content,
        "article_id": article_id,
        "user_id": user["id"],
        "author_name": user.get("name", ""),
        "created_at": datetime.now(timezone.utc).isoformat(),
    }


async def add_comment(client, state: ArticleState, user: dict, content: str) -> bool:
    """
    Show the comment immediately, then replace the list with the server's.

    If the comment was stored but the refresh fails, the placeholder is
    swapped for the stored comment.
    """
    placeholder = placeholder_comment(state.article_id, user, content)
    update = OptimisticUpdate(state, ["comments"], label="comment add")
    update.apply(lambda s: setattr(s, "comments", [placeholder] + s.comments))

    async def remote():
        created = await client.create_comment(state.article_id, content)
        try:
            return await client.list_comments(state.article_id)
        except Exception as e:
            logger.warning(f"Comment list refresh failed, keeping local list: {e}")
            return [created if c is placeholder else c for c in state.comments]

    ok = await update.commit_or_revert(remote)
    if ok:
        state.comments = list(update.result)
    return ok
