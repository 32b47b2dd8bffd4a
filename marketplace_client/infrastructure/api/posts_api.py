"""News feed endpoint (``/posts``)."""

from marketplace_client.domain.entities.pagination import Page
from marketplace_client.domain.entities.post import Post
from marketplace_client.domain.interfaces.api import IPostsApi

from .http_client import ApiClient
from .schemas import decode_list


class PostsApi(IPostsApi):
    """`IPostsApi` over HTTP."""

    def __init__(self, client: ApiClient):
        self._client = client

    async def list_posts(self, page: int, limit: int) -> Page[Post]:
        envelope = await self._client.get("/posts", params={"page": page, "limit": limit})
        return Page(items=tuple(decode_list(Post, envelope.data or [])), pagination=envelope.pagination)
