"""
HTTP routes against the in-memory database.

The app is driven without its lifespan, so no Mongo connection is made.
"""

from conftest import auth_headers

BASE = "/api/v1"

BLOCKS = [
    {"type": "header", "data": {"text": "Hello", "level": 2}},
    {"type": "paragraph", "data": {"text": "World"}},
]


def _publish(api, headers, title="My First Post", blocks=None):
    response = api.post(
        f"{BASE}/articles",
        json={"title": title, "blocks": BLOCKS if blocks is None else blocks},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health(api):
    assert api.get("/").json()["status"] == "healthy"


def test_categories(api):
    categories = api.get(f"{BASE}/articles/categories").json()["categories"]
    assert "Technology" in categories


class TestArticles:
    def test_publish_requires_auth(self, api):
        response = api.post(f"{BASE}/articles", json={"title": "t", "blocks": BLOCKS})
        assert response.status_code in (401, 403)

    def test_publish_and_read_back(self, api, ada_headers):
        created = _publish(api, ada_headers)

        assert created["summary"] == "Hello\nWorld..."
        assert created["tags"] == ["General"]
        assert [n["kind"] for n in created["body"]] == ["heading", "paragraph"]

        detail = api.get(f"{BASE}/articles/{created['id']}").json()
        assert detail["title"] == "My First Post"
        assert detail["body"][0]["text"] == "Hello"
        assert detail["views"] == 0
        assert detail["liked_by"] == []

    def test_empty_content_rejected(self, api, ada_headers):
        response = api.post(f"{BASE}/articles", json={"title": "t", "blocks": []}, headers=ada_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Please write some content before publishing."

    def test_feed_lists_cards(self, api, ada_headers):
        first = _publish(api, ada_headers, title="First")
        _publish(api, ada_headers, title="Second")

        body = api.get(f"{BASE}/articles").json()

        assert body["total"] == 2
        card = next(a for a in body["articles"] if a["id"] == first["id"])
        assert card["author_name"] == "Ada"
        assert card["cover_url"].startswith("https://picsum.photos/seed/")
        assert card["like_count"] == 0
        assert card["read_time_minutes"] >= 1

    def test_feed_without_sort_index(self, api, fake_db, ada_headers):
        _publish(api, ada_headers, title="First")
        _publish(api, ada_headers, title="Second")
        fake_db["articles"].fail_sort = True

        response = api.get(f"{BASE}/articles")

        assert response.status_code == 200
        assert [a["title"] for a in response.json()["articles"]] == ["First", "Second"]

    def test_feed_filters(self, api, ada_headers):
        _publish(api, ada_headers, title="Gardening notes")
        _publish(api, ada_headers, title="Other")

        assert api.get(f"{BASE}/articles", params={"q": "garden"}).json()["total"] == 1
        assert api.get(f"{BASE}/articles", params={"category": "General"}).json()["total"] == 2
        assert api.get(f"{BASE}/articles", params={"category": "Design"}).json()["total"] == 0

    def test_legacy_plain_text_article_renders(self, api, fake_db, ada_headers):
        created = _publish(api, ada_headers)
        fake_db["articles"].docs[0]["content"] = "line one\nline two"

        body = api.get(f"{BASE}/articles/{created['id']}").json()["body"]

        assert [n["text"] for n in body] == ["line one", "line two"]

    def test_unknown_article(self, api):
        assert api.get(f"{BASE}/articles/nope").status_code == 404

    def test_likes_replace_set(self, api, ada_headers, bob_headers):
        article = _publish(api, ada_headers)
        url = f"{BASE}/articles/{article['id']}/likes"

        response = api.put(url, json={"liked_by": ["user-bob"]}, headers=bob_headers)

        assert response.json() == {"liked_by": ["user-bob"]}
        assert api.get(f"{BASE}/articles/{article['id']}").json()["liked_by"] == ["user-bob"]

    def test_views_are_monotonic(self, api, ada_headers):
        article = _publish(api, ada_headers)
        url = f"{BASE}/articles/{article['id']}/views"

        assert api.put(url, json={"views": 3}).json() == {"views": 3}
        assert api.put(url, json={"views": 1}).json() == {"views": 3}
        assert api.put(url, json={"views": -1}).status_code == 422

    def test_inspire_without_key(self, api, ada_headers):
        response = api.post(f"{BASE}/articles/inspire", json={"topic": "tea"}, headers=ada_headers)
        assert response.json()["text"] == "Please configure your API key to use AI features."


class TestComments:
    def test_add_and_list(self, api, ada_headers, bob_headers):
        article = _publish(api, ada_headers)
        url = f"{BASE}/articles/{article['id']}/comments"

        created = api.post(url, json={"content": "  Nice piece  "}, headers=bob_headers)

        assert created.status_code == 201
        assert created.json()["content"] == "Nice piece"
        assert created.json()["author_name"] == "Bob"

        listed = api.get(url).json()
        assert listed["total"] == 1
        assert listed["comments"][0]["user_id"] == "user-bob"

    def test_blank_comment_rejected(self, api, ada_headers):
        article = _publish(api, ada_headers)
        response = api.post(f"{BASE}/articles/{article['id']}/comments", json={"content": ""}, headers=ada_headers)
        assert response.status_code == 422

    def test_whitespace_only_comment_rejected(self, api, fake_db, ada_headers):
        article = _publish(api, ada_headers)
        response = api.post(f"{BASE}/articles/{article['id']}/comments", json={"content": " \n\t "}, headers=ada_headers)
        assert response.status_code == 422
        assert fake_db["comments"].docs == []


class TestFollows:
    def test_follow_is_not_duplicated(self, api, fake_db, ada_headers):
        first = api.post(f"{BASE}/follows", json={"following_id": "user-bob"}, headers=ada_headers)
        second = api.post(f"{BASE}/follows", json={"following_id": "user-bob"}, headers=ada_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["id"] == first.json()["id"]
        assert second.json()["created"] is False
        assert len(fake_db["follows"].docs) == 1

    def test_cannot_follow_self(self, api, ada_headers):
        response = api.post(f"{BASE}/follows", json={"following_id": "user-ada"}, headers=ada_headers)
        assert response.status_code == 400

    def test_status_and_unfollow(self, api, ada_headers, bob_headers):
        edge = api.post(f"{BASE}/follows", json={"following_id": "user-bob"}, headers=ada_headers).json()

        status = api.get(f"{BASE}/users/user-bob/follow-status", headers=ada_headers).json()
        assert status["following"] is True
        assert status["follow_id"] == edge["id"]
        assert status["follower_count"] == 1

        assert api.delete(f"{BASE}/follows/{edge['id']}", headers=bob_headers).status_code == 403
        assert api.delete(f"{BASE}/follows/{edge['id']}", headers=ada_headers).status_code == 204

        anonymous = api.get(f"{BASE}/users/user-bob/follow-status").json()
        assert anonymous == {"following": False, "follow_id": None, "follower_count": 0, "following_count": 0}

    def test_follow_lookup_without_compound_index(self, api, fake_db, ada_headers):
        api.post(f"{BASE}/follows", json={"following_id": "user-bob"}, headers=ada_headers)
        fake_db["follows"].fail_compound = True

        second = api.post(f"{BASE}/follows", json={"following_id": "user-bob"}, headers=ada_headers)

        assert second.status_code == 200
        assert len(fake_db["follows"].docs) == 1


class TestAccounts:
    def test_register_publish_profile(self, api):
        registered = api.post(
            f"{BASE}/auth/register",
            json={"email": "grace@example.com", "password": "correct-horse", "name": "Grace"},
        ).json()
        user_id = registered["user"]["id"]
        headers = {"Authorization": f"Bearer {registered['access_token']}"}
        assert registered["user"]["prefs"]["avatar"]

        _publish(api, headers, title="Grace's post")
        profile = api.get(f"{BASE}/users/{user_id}").json()

        assert profile["user"]["name"] == "Grace"
        assert [a["title"] for a in profile["articles"]] == ["Grace's post"]

    def test_login_with_wrong_password(self, api):
        api.post(
            f"{BASE}/auth/register",
            json={"email": "grace@example.com", "password": "correct-horse", "name": "Grace"},
        )
        response = api.post(f"{BASE}/auth/login", json={"email": "grace@example.com", "password": "wrong-pass"})
        assert response.status_code == 401

    def test_prefs_merge(self, api):
        registered = api.post(
            f"{BASE}/auth/register",
            json={"email": "grace@example.com", "password": "correct-horse", "name": "Grace"},
        ).json()
        headers = {"Authorization": f"Bearer {registered['access_token']}"}

        prefs = api.patch(f"{BASE}/auth/me/prefs", json={"prefs": {"theme": "dark"}}, headers=headers).json()

        assert prefs["theme"] == "dark"
        assert prefs["avatar"] == registered["user"]["prefs"]["avatar"]


def test_setup_status_without_database(api):
    body = api.get(f"{BASE}/setup/status").json()
    assert body["connected"] is False
    assert body["setup_guide"]


def test_permission_error_on_write(api, fake_db):
    from pymongo.errors import OperationFailure

    fake_db["articles"].fail_with = OperationFailure("not authorized", code=13)

    response = api.post(f"{BASE}/articles", json={"title": "t", "blocks": BLOCKS}, headers=auth_headers("u1"))

    assert response.status_code == 403
    assert "insert" in response.json()["detail"]
