import asyncio
import logging
from typing import Any, Optional

import requests

from chunksearch.core.errors import StoreUnavailable
from chunksearch.core.models.chunk import Chunk, ChunkMetadata

logger = logging.getLogger(__name__)


class ChromaChunkStore:
    """Read-only chunk store using ChromaDB HTTP API."""

    INCLUDE = ["documents", "metadatas", "embeddings"]

    def __init__(
        self,
        host: str = "localhost",
        port: int = 8001,
        collection_name: str = "chunks",
        tenant: str = "default_tenant",
        database: str = "default_database",
        timeout: float = 10.0,
    ):
        """Initialize ChromaDB client.

        Args:
            host: ChromaDB host.
            port: ChromaDB port.
            collection_name: Collection name.
            tenant: Tenant name.
            database: Database name.
            timeout: HTTP timeout in seconds.
        """
        self._base_url = f"http://{host}:{port}/api/v2"
        self._tenant = tenant
        self._database = database
        self._collection_name = collection_name
        self._timeout = timeout
        self._collection_id: Optional[str] = None

    @property
    def _collections_url(self) -> str:
        return f"{self._base_url}/tenants/{self._tenant}/databases/{self._database}/collections"

    def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = requests.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise StoreUnavailable(f"Chroma request failed: {e}", cause=e) from e

        if resp.status_code != 200:
            raise StoreUnavailable(f"Chroma returned {resp.status_code}: {resp.text[:200]}")
        return resp.json()

    def _ensure_collection(self) -> str:
        """Look up collection ID."""
        if self._collection_id:
            return self._collection_id

        for col in self._request("GET", self._collections_url):
            if col["name"] == self._collection_name:
                self._collection_id = col["id"]
                return self._collection_id

        raise StoreUnavailable(f"Collection not found: {self._collection_name}")

    @staticmethod
    def _to_chunk(chunk_id: str, document: str, metadata: Optional[dict], embedding) -> Chunk:
        metadata = metadata or {}
        keywords = metadata.get("keywords") or ""
        if isinstance(keywords, str):
            keywords = [k.strip() for k in keywords.split(",") if k.strip()]
        return Chunk(
            id=chunk_id,
            document_id=str(metadata.get("document_id", "")),
            content=document,
            keywords=tuple(keywords),
            embedding=[float(v) for v in embedding] if embedding is not None else None,
            metadata=ChunkMetadata.from_dict(metadata),
        )

    def _parse_get(self, data: dict) -> list[Chunk]:
        ids = data.get("ids") or []
        documents = data.get("documents") or [None] * len(ids)
        metadatas = data.get("metadatas") or [None] * len(ids)
        embeddings = data.get("embeddings") or [None] * len(ids)
        return [
            self._to_chunk(ids[i], documents[i], metadatas[i], embeddings[i])
            for i in range(len(ids))
            if documents[i]
        ]

    @staticmethod
    def _where(document_id: Optional[str]) -> Optional[dict]:
        return {"document_id": document_id} if document_id else None

    def _get(self, where_document: Optional[dict], document_id: Optional[str], limit: int) -> list[Chunk]:
        col_id = self._ensure_collection()
        payload: dict[str, Any] = {"limit": limit, "include": self.INCLUDE}
        if where_document:
            payload["where_document"] = where_document
        where = self._where(document_id)
        if where:
            payload["where"] = where
        data = self._request("POST", f"{self._collections_url}/{col_id}/get", json=payload)
        return self._parse_get(data)

    def _query(self, embedding: list[float], document_id: Optional[str], limit: int) -> list[Chunk]:
        col_id = self._ensure_collection()
        payload: dict[str, Any] = {
            "query_embeddings": [embedding],
            "n_results": limit,
            "include": self.INCLUDE,
        }
        where = self._where(document_id)
        if where:
            payload["where"] = where
        data = self._request("POST", f"{self._collections_url}/{col_id}/query", json=payload)

        if not data.get("ids") or not data["ids"][0]:
            return []
        return self._parse_get(
            {key: (data.get(key) or [None])[0] for key in ("ids", "documents", "metadatas", "embeddings")}
        )

    async def fetch_by_keywords(
        self,
        keywords: list[str],
        document_id: Optional[str] = None,
        limit: int = 15,
    ) -> list[Chunk]:
        if not keywords:
            return []
        clauses = [{"$contains": k} for k in keywords]
        where_document = clauses[0] if len(clauses) == 1 else {"$or": clauses}
        return await asyncio.to_thread(self._get, where_document, document_id, limit)

    async def fetch_by_text(
        self,
        text: str,
        document_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[Chunk]:
        if not text.strip():
            return []
        return await asyncio.to_thread(self._get, {"$contains": text.strip()}, document_id, limit)

    async def fetch_by_vector(
        self,
        embedding: list[float],
        document_id: Optional[str] = None,
        limit: int = 10,
    ) -> list[Chunk]:
        if not embedding:
            return []
        return await asyncio.to_thread(self._query, embedding, document_id, limit)

    async def fetch_all(self, limit: int = 10000) -> list[Chunk]:
        chunks = await asyncio.to_thread(self._get, None, None, limit)
        logger.debug(f"Full scan: {len(chunks)} chunks")
        return chunks

    def count(self) -> int:
        """Get chunk count."""
        col_id = self._ensure_collection()
        return int(self._request("GET", f"{self._collections_url}/{col_id}/count"))
