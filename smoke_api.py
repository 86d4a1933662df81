#!/usr/bin/env python3
"""
End-to-end smoke script for a running Pedium API.
Walks the main flows in positive order: auth, publish, feed, engagement.
"""

import sys
import uuid
from typing import Optional

import requests

BASE_URL = "http://localhost:8000"
API_BASE = f"{BASE_URL}/api/v1"

TEST_USER = {
    "email": "smoke@pedium.dev",
    "password": "smokepassword123",
    "name": "Smoke Writer",
}

TEST_BLOCKS = [
    {"type": "header", "data": {"text": "Hello", "level": 2}},
    {"type": "paragraph", "data": {"text": "World"}},
    {"type": "list", "data": {"style": "unordered", "items": ["one", "two"]}},
]


class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    BLUE = '\033[94m'
    END = '\033[0m'


def print_step(name: str):
    print(f"\n{Colors.BLUE}=== {name} ==={Colors.END}")


def print_success(msg: str):
    print(f"{Colors.GREEN}✓ {msg}{Colors.END}")


def print_error(msg: str):
    print(f"{Colors.RED}✗ {msg}{Colors.END}")


def print_info(msg: str):
    print(f"{Colors.YELLOW}ℹ {msg}{Colors.END}")


def check_health() -> bool:
    print_step("Health Checks")
    try:
        r = requests.get(f"{BASE_URL}/health")
        assert r.status_code == 200
        print_success("GET /health")
        print_info(f"Database: {r.json().get('database', 'unknown')}")

        r = requests.get(f"{API_BASE}/setup/status")
        data = r.json()
        if data["connected"]:
            print_success("GET /setup/status - database reachable")
        else:
            print_error(f"GET /setup/status - {data.get('error')}")
            for step in data.get("setup_guide", []):
                print_info(step)
            return False
    except Exception as e:
        print_error(f"Health - {str(e)}")
        return False
    return True


def login() -> Optional[str]:
    """Register (or log in if already registered). Returns the access token."""
    print_step("Authentication")
    try:
        r = requests.post(f"{API_BASE}/auth/register", json=TEST_USER)
        if r.status_code == 400 and "already registered" in r.json().get("detail", "").lower():
            print_info("User already exists, logging in...")
            r = requests.post(f"{API_BASE}/auth/login", json={
                "email": TEST_USER["email"],
                "password": TEST_USER["password"],
            })
        assert r.status_code == 200, r.text
        print_success("Signed in")
        return r.json()["access_token"]
    except Exception as e:
        print_error(f"Auth - {str(e)}")
        return None


def publish_and_read(headers: dict) -> Optional[str]:
    print_step("Publishing")
    try:
        title = f"Smoke test {uuid.uuid4().hex[:6]}"
        r = requests.post(f"{API_BASE}/articles", json={"title": title, "blocks": TEST_BLOCKS}, headers=headers)
        assert r.status_code == 201, r.text
        article = r.json()
        print_success(f"POST /articles - published {article['id']}")
        print_info(f"Summary: {article['summary']!r} Tags: {article['tags']}")

        r = requests.get(f"{API_BASE}/articles")
        assert r.status_code == 200
        assert any(a["id"] == article["id"] for a in r.json()["articles"])
        print_success("GET /articles - article in feed")

        r = requests.get(f"{API_BASE}/articles/{article['id']}")
        assert [n["kind"] for n in r.json()["body"]] == ["heading", "paragraph", "list"]
        print_success("GET /articles/{id} - body rendered")
        return article["id"]
    except Exception as e:
        print_error(f"Publishing - {str(e)}")
        return None


def engage(headers: dict, article_id: str, user_id: str) -> bool:
    print_step("Engagement")
    try:
        r = requests.put(f"{API_BASE}/articles/{article_id}/likes", json={"liked_by": [user_id]}, headers=headers)
        assert r.json()["liked_by"] == [user_id]
        print_success("PUT /articles/{id}/likes")

        r = requests.put(f"{API_BASE}/articles/{article_id}/views", json={"views": 1})
        assert r.json()["views"] >= 1
        print_success("PUT /articles/{id}/views")

        r = requests.post(f"{API_BASE}/articles/{article_id}/comments", json={"content": "First!"}, headers=headers)
        assert r.status_code == 201, r.text
        print_success("POST /articles/{id}/comments")

        r = requests.get(f"{API_BASE}/users/{user_id}")
        assert r.status_code == 200
        print_success(f"GET /users/{{id}} - {len(r.json()['articles'])} articles on profile")
    except Exception as e:
        print_error(f"Engagement - {str(e)}")
        return False
    return True


def main():
    print(f"\n{Colors.BLUE}{'='*60}")
    print("Pedium API - Smoke Run")
    print(f"{'='*60}{Colors.END}\n")
    print_info(f"Target: {BASE_URL}")

    if not check_health():
        print_error("\nBackend is not ready. Is the API running and MongoDB reachable?")
        sys.exit(1)

    token = login()
    if not token:
        sys.exit(1)
    headers = {"Authorization": f"Bearer {token}"}
    user_id = requests.get(f"{API_BASE}/auth/me", headers=headers).json()["id"]

    article_id = publish_and_read(headers)
    if not article_id:
        sys.exit(1)

    if not engage(headers, article_id, user_id):
        sys.exit(1)

    print(f"\n{Colors.GREEN}{'='*60}")
    print("Smoke run completed!")
    print(f"{'='*60}{Colors.END}\n")


if __name__ == "__main__":
    main()
