"""
Document store adapters.

The catalog only needs three operations against a collection of documents:
list everything, create a document and get its generated id back, and
delete by id. Every adapter exposes them as coroutines and reports any
failure as ``StoreError``. Blocking work (file IO, HTTP) is pushed to the
default executor so the event loop is never held up.
"""

import asyncio
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import requests

from .errors import StoreError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


async def _in_executor(func, *args):
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args))


class DocumentStore(ABC):
    @abstractmethod
    async def list_all(self) -> List[Tuple[str, Record]]:
        """Every document in the collection as ``(id, record)`` pairs."""

    @abstractmethod
    async def create(self, record: Record) -> str:
        """Store a new document and return its generated id."""

    @abstractmethod
    async def delete(self, doc_id: str) -> None:
        """Remove a document; a missing id is not an error."""


class MemoryStore(DocumentStore):
    def __init__(self, documents: Optional[Dict[str, Record]] = None):
        self.documents: Dict[str, Record] = dict(documents or {})

    async def list_all(self) -> List[Tuple[str, Record]]:
        return [(doc_id, dict(record)) for doc_id, record in self.documents.items()]

    async def create(self, record: Record) -> str:
        doc_id = uuid.uuid4().hex
        self.documents[doc_id] = dict(record)
        return doc_id

    async def delete(self, doc_id: str) -> None:
        self.documents.pop(doc_id, None)


class JsonFileStore(DocumentStore):
    """A document collection kept in a JSON file on disk."""

    def __init__(self, path: Path, collection: str = "tools"):
        self.path = Path(path)
        self.collection = collection
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StoreError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StoreError(f"Unexpected content in {self.path}")
        return data

    def _write(self, data: Dict[str, Any]):
        try:
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Could not write {self.path}: {exc}") from exc

    def _list_sync(self) -> List[Tuple[str, Record]]:
        with self._lock:
            docs = self._read().get(self.collection) or {}
        return list(docs.items())

    def _create_sync(self, record: Record) -> str:
        doc_id = uuid.uuid4().hex
        with self._lock:
            data = self._read()
            data.setdefault(self.collection, {})[doc_id] = record
            self._write(data)
        return doc_id

    def _delete_sync(self, doc_id: str):
        with self._lock:
            data = self._read()
            docs = data.get(self.collection) or {}
            if doc_id not in docs:
                return
            del docs[doc_id]
            self._write(data)

    async def list_all(self) -> List[Tuple[str, Record]]:
        return await _in_executor(self._list_sync)

    async def create(self, record: Record) -> str:
        return await _in_executor(self._create_sync, record)

    async def delete(self, doc_id: str) -> None:
        await _in_executor(self._delete_sync, doc_id)


class RestStore(DocumentStore):
    """
    Generic REST document collection:
    - GET    {base}/{collection}        -> [{"id": ..., ...}, ...]
    - POST   {base}/{collection}        -> {"id": ...}
    - DELETE {base}/{collection}/{id}   (404 counts as already deleted)
    """

    def __init__(
        self,
        base_url: str,
        collection: str = "tools",
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = f"{base_url.rstrip('/')}/{collection}"
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise StoreError(f"{method} {url} failed: {exc}") from exc
        return resp

    def _list_sync(self) -> List[Tuple[str, Record]]:
        resp = self._request("GET", self.endpoint)
        if resp.status_code != 200:
            raise StoreError(f"GET {self.endpoint} returned {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError as exc:
            raise StoreError("Store returned invalid JSON") from exc
        if isinstance(payload, dict):
            payload = payload.get("documents") or []
        docs = []
        for item in payload:
            item = dict(item)
            doc_id = item.pop("id", None)
            if doc_id is None:
                logger.warning("Skipping document without id from %s", self.endpoint)
                continue
            docs.append((str(doc_id), item))
        return docs

    def _create_sync(self, record: Record) -> str:
        resp = self._request("POST", self.endpoint, json=record)
        if resp.status_code not in (200, 201):
            raise StoreError(f"POST {self.endpoint} returned {resp.status_code}")
        try:
            doc_id = resp.json().get("id")
        except (ValueError, AttributeError) as exc:
            raise StoreError("Store returned invalid JSON") from exc
        if not doc_id:
            raise StoreError("Store did not return a document id")
        return str(doc_id)

    def _delete_sync(self, doc_id: str):
        url = f"{self.endpoint}/{doc_id}"
        resp = self._request("DELETE", url)
        if resp.status_code == 404:
            logger.info("Document %s already gone", doc_id)
            return
        if resp.status_code >= 300:
            raise StoreError(f"DELETE {url} returned {resp.status_code}")

    async def list_all(self) -> List[Tuple[str, Record]]:
        return await _in_executor(self._list_sync)

    async def create(self, record: Record) -> str:
        return await _in_executor(self._create_sync, record)

    async def delete(self, doc_id: str) -> None:
        await _in_executor(self._delete_sync, doc_id)
