"""Async HTTP client for the Pedium API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class PediumAPIError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, detail: Any):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{status_code}: {detail}")


class PediumClient:
    """
    Thin wrapper over httpx.AsyncClient.

    Construct one per session and pass it to the reducers; tests hand the
    reducers a stand-in with the same coroutine methods.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 http: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or get_settings().PEDIUM_API_URL).rstrip("/")
        self.token = token
        self._http = http or httpx.AsyncClient(base_url=self.base_url)

    async def __aenter__(self) -> "PediumClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._http.request(method, path, headers=self._headers(), **kwargs)
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise PediumAPIError(response.status_code, detail)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Auth

    async def login(self, email: str, password: str) -> dict:
        data = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data["user"]

    async def register(self, email: str, password: str, name: str) -> dict:
        data = await self._request("POST", "/auth/register", json={"email": email, "password": password, "name": name})
        self.token = data["access_token"]
        return data["user"]

    async def me(self) -> dict:
        return await self._request("GET", "/auth/me")

    # Articles

    async def list_articles(self, category: Optional[str] = None, q: Optional[str] = None) -> List[dict]:
        params = {k: v for k, v in {"category": category, "q": q}.items() if v}
        data = await self._request("GET", "/articles", params=params)
        return data["articles"]

    async def get_article(self, article_id: str) -> dict:
        return await self._request("GET", f"/articles/{article_id}")

    async def publish(self, title: str, blocks: List[dict], cover_image_id: Optional[str] = None) -> dict:
        payload = {"title": title, "blocks": blocks, "cover_image_id": cover_image_id}
        return await self._request("POST", "/articles", json=payload)

    async def set_likes(self, article_id: str, liked_by: List[str]) -> List[str]:
        data = await self._request("PUT", f"/articles/{article_id}/likes", json={"liked_by": liked_by})
        return data["liked_by"]

    async def set_views(self, article_id: str, views: int) -> int:
        data = await self._request("PUT", f"/articles/{article_id}/views", json={"views": views})
        return data["views"]

    # Comments

    async def list_comments(self, article_id: str) -> List[dict]:
        data = await self._request("GET", f"/articles/{article_id}/comments")
        return data["comments"]

    async def create_comment(self, article_id: str, content: str) -> dict:
        return await self._request("POST", f"/articles/{article_id}/comments", json={"content": content})

    # Follows

    async def follow(self, user_id: str) -> dict:
        return await self._request("POST", "/follows", json={"following_id": user_id})

    async def unfollow(self, follow_id: str) -> None:
        await self._request("DELETE", f"/follows/{follow_id}")

    async def follow_status(self, user_id: str) -> dict:
        return await self._request("GET", f"/users/{user_id}/follow-status")
