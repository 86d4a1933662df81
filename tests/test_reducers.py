"""
Optimistic client actions: apply locally, confirm remotely, revert on failure.
"""

import pytest

from app.client.optimistic import OptimisticUpdate
from app.client.reducers import (
    ArticleState,
    FollowState,
    add_comment,
    record_view,
    toggle_follow,
    toggle_like,
    toggled_likes,
    with_like,
)
from app.client.viewed import ViewedSet

from fakes import RecordingClient

ADA = {"id": "user-ada", "name": "Ada"}


@pytest.fixture
def client():
    return RecordingClient()


@pytest.fixture
def viewed(tmp_path):
    return ViewedSet(tmp_path / "viewed.json")


class TestLikeSets:
    def test_with_like_is_idempotent(self):
        once = with_like(["bob"], "ada", True)
        assert with_like(once, "ada", True) == once == ["bob", "ada"]

    def test_toggle_twice_restores(self):
        start = ["bob", "ada"]
        assert toggled_likes(toggled_likes(start, "ada"), "ada") == ["bob", "ada"]
        assert toggled_likes(start, "ada") == ["bob"]


class TestToggleLike:
    @pytest.mark.asyncio
    async def test_like_sends_whole_set(self, client):
        state = ArticleState("a1", liked_by=["bob"])

        assert await toggle_like(client, state, "ada") is True

        assert state.liked_by == ["bob", "ada"]
        assert client.calls == [("set_likes", "a1", ["bob", "ada"])]

    @pytest.mark.asyncio
    async def test_second_toggle_observes_first(self, client):
        state = ArticleState("a1")

        await toggle_like(client, state, "ada")
        await toggle_like(client, state, "ada")

        assert state.liked_by == []
        assert [c[2] for c in client.calls] == [["ada"], []]

    @pytest.mark.asyncio
    async def test_failure_reverts(self, client):
        client.fail.add("set_likes")
        state = ArticleState("a1", liked_by=["bob"])

        assert await toggle_like(client, state, "ada") is False
        assert state.liked_by == ["bob"]


class TestToggleFollow:
    @pytest.mark.asyncio
    async def test_follow_stores_edge_id(self, client):
        state = FollowState("user-bob", follower_count=4)

        assert await toggle_follow(client, state) is True

        assert state.following is True
        assert state.follow_id == "follow-1"
        assert state.follower_count == 5

    @pytest.mark.asyncio
    async def test_unfollow(self, client):
        state = FollowState("user-bob", following=True, follow_id="follow-9", follower_count=5)

        assert await toggle_follow(client, state) is True

        assert client.calls == [("unfollow", "follow-9")]
        assert (state.following, state.follow_id, state.follower_count) == (False, None, 4)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("following,method", [(False, "follow"), (True, "unfollow")])
    async def test_failure_restores_flag_and_count(self, client, following, method):
        client.fail.add(method)
        state = FollowState("user-bob", following=following, follow_id="follow-9" if following else None,
                            follower_count=5)
        before = (state.following, state.follow_id, state.follower_count)

        assert await toggle_follow(client, state) is False

        assert (state.following, state.follow_id, state.follower_count) == before

    @pytest.mark.asyncio
    async def test_unfollow_without_edge_id_reverts(self, client):
        state = FollowState("user-bob", following=True, follower_count=1)

        assert await toggle_follow(client, state) is False

        assert state.following is True and state.follower_count == 1
        assert client.calls == []


class TestRecordView:
    @pytest.mark.asyncio
    async def test_counts_once_per_device(self, client, viewed):
        state = ArticleState("a1", views=7)

        assert await record_view(client, state, viewed) is True
        assert state.views == 8
        assert "a1" in viewed

        assert await record_view(client, state, viewed) is False
        assert state.views == 8
        assert client.calls == [("set_views", "a1", 8)]

    @pytest.mark.asyncio
    async def test_failed_write_does_not_mark_viewed(self, client, viewed):
        client.fail.add("set_views")
        state = ArticleState("a1", views=7)

        assert await record_view(client, state, viewed) is False

        assert state.views == 7
        assert "a1" not in viewed


class TestAddComment:
    @pytest.mark.asyncio
    async def test_list_replaced_with_server_copy(self, client):
        existing = {"id": "c0", "content": "old"}
        client.comments = [existing]
        state = ArticleState("a1", comments=[existing])

        assert await add_comment(client, state, ADA, "new one") is True

        assert [c["id"] for c in state.comments] == ["c2", "c0"]
        assert not any(c["id"].startswith("temp-") for c in state.comments)

    @pytest.mark.asyncio
    async def test_create_failure_removes_placeholder(self, client):
        client.fail.add("create_comment")
        state = ArticleState("a1", comments=[{"id": "c0"}])

        assert await add_comment(client, state, ADA, "lost") is False

        assert state.comments == [{"id": "c0"}]

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_created_comment(self, client):
        client.fail.add("list_comments")
        state = ArticleState("a1", comments=[{"id": "c0"}])

        assert await add_comment(client, state, ADA, "kept") is True

        assert [c["id"] for c in state.comments] == ["c1", "c0"]
        assert state.comments[0]["content"] == "kept"


class TestOptimisticUpdate:
    @pytest.mark.asyncio
    async def test_snapshot_is_a_deep_copy(self):
        state = ArticleState("a1", liked_by=["bob"])
        update = OptimisticUpdate(state, ["liked_by"])
        update.apply(lambda s: s.liked_by.append("ada"))

        async def boom():
            raise RuntimeError("offline")

        assert await update.commit_or_revert(boom) is False
        assert state.liked_by == ["bob"]
        assert isinstance(update.error, RuntimeError)
