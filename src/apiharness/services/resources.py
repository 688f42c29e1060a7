"""CRUD helpers for REST collections, composed over ApiHelper.

Usage:
    users = ResourceClient(api_helper, "/users", model=User)
    created = await users.create(data_generator.generate("user"))
    fetched = await users.get(1)
"""

from typing import Any

from apiharness.services.api_helper import ApiHelper
from apiharness.services.models import ApiResponse


class ResourceClient:
    """Typed CRUD operations on one collection path.

    Delegates every call to a shared ApiHelper, so base URL, default headers
    and auth all come from that helper.

    Attributes:
        api: The ApiHelper that performs requests.
        path: Collection path, e.g. "/users".
        model: Optional item model used to unwrap 2xx bodies.
    """

    def __init__(self, api: ApiHelper, path: str, model: Any = None) -> None:
        self.api = api
        self.path = "/" + path.strip("/")
        self.model = model

    def _item_path(self, item_id: int | str) -> str:
        return f"{self.path}/{item_id}"

    async def list(self, params: dict[str, Any] | None = None, **kwargs: Any) -> ApiResponse[Any]:
        """GET the collection."""
        model = list[self.model] if self.model is not None else None
        return await self.api.get(self.path, params=params, model=model, **kwargs)

    async def get(self, item_id: int | str, **kwargs: Any) -> ApiResponse[Any]:
        """GET one item."""
        return await self.api.get(self._item_path(item_id), model=self.model, **kwargs)

    async def create(self, payload: dict[str, Any], **kwargs: Any) -> ApiResponse[Any]:
        """POST a new item."""
        return await self.api.post(self.path, json=payload, model=self.model, **kwargs)

    async def update(
        self, item_id: int | str, payload: dict[str, Any], **kwargs: Any
    ) -> ApiResponse[Any]:
        """PUT a full replacement."""
        return await self.api.put(self._item_path(item_id), json=payload, model=self.model, **kwargs)

    async def patch(
        self, item_id: int | str, changes: dict[str, Any], **kwargs: Any
    ) -> ApiResponse[Any]:
        """PATCH selected fields."""
        return await self.api.patch(
            self._item_path(item_id), json=changes, model=self.model, **kwargs
        )

    async def delete(self, item_id: int | str, **kwargs: Any) -> ApiResponse[Any]:
        """DELETE one item. The body is returned untyped."""
        return await self.api.delete(self._item_path(item_id), **kwargs)
