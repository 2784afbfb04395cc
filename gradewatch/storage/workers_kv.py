# gradewatch/storage/workers_kv.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

from playwright.async_api import APIRequestContext

from .base import DocumentStore
from . import register_store, StoreError

logger = logging.getLogger(__name__)

API_ROOT = "https://api.cloudflare.com/client/v4"


@register_store("workers_kv")
class WorkersKV(DocumentStore):
    """Cloudflare Workers KV namespace, one JSON document per key."""

    def __init__(self, request: APIRequestContext, account_id: str, api_token: str, namespace_id: str) -> None:
        self.request = request
        self.account_id, self.api_token, self.namespace_id = account_id, api_token, namespace_id

    @classmethod
    def from_settings(cls, settings, request: APIRequestContext) -> "WorkersKV":
        return cls(request, settings.cf_account_id, settings.cf_api_token, settings.cf_namespace_id)

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
        }

    def value_url(self, key: str) -> str:
        return (
            f"{API_ROOT}/accounts/{self.account_id}/storage/kv/namespaces/"
            f"{self.namespace_id}/values/{quote(key, safe='')}"
        )

    async def _raise_for_status(self, resp, method: str, key: str) -> None:
        if resp.ok:
            return
        logger.error("KV Error Response: %s", await resp.text())
        raise StoreError(f'Failed KV operation ({method}) on key "{key}": {resp.status} {resp.status_text}')

    async def _read(self, key: str) -> Optional[Any]:
        resp = await self.request.get(self.value_url(key), headers=self.headers)
        if resp.status == 404:
            return None
        await self._raise_for_status(resp, "GET", key)
        text = await resp.text()
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text  # plain-text value

    async def _write(self, key: str, value: Any) -> None:
        body = value if isinstance(value, str) else json.dumps(value)
        resp = await self.request.put(self.value_url(key), headers=self.headers, data=body)
        await self._raise_for_status(resp, "PUT", key)

    async def _remove(self, key: str) -> None:
        resp = await self.request.delete(self.value_url(key), headers=self.headers)
        await self._raise_for_status(resp, "DELETE", key)
