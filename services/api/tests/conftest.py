"""In-memory stand-ins for the providers, document store and object store."""
from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from studymate_shared import CollectionKind
from studymate_shared.errors import NotFound, ProviderError

from app.services.answering import AnswerOrchestrator
from app.services.generation import AnswerSynthesizer
from app.services.retrieval import Retriever


class FakeEmbedder:
    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, default: Optional[List[float]] = None):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty text")
        return list(self.vectors.get(text, self.default))


class SlowEmbedder:
    async def embed(self, text: str) -> List[float]:
        await asyncio.sleep(5)
        return [1.0, 0.0, 0.0]


class FakeGenerator:
    def __init__(self, reply: str = "It has four phases: prophase, metaphase, anaphase and telophase."):
        self.reply = reply
        self.calls: List[Tuple[str, str, int]] = []

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        self.calls.append((system_prompt, user_prompt, max_tokens))
        return self.reply


class FailingGenerator:
    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        raise ProviderError("provider down")


class FakeTranscriber:
    def __init__(self, transcript: str = "Today we cover the phases of mitosis."):
        self.transcript = transcript
        self.calls: List[str] = []

    async def transcribe(self, audio: bytes, filename: str) -> str:
        self.calls.append(filename)
        return self.transcript


class FakeObjectStore:
    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    async def put(self, key: str, body: bytes, content_type: Optional[str]) -> None:
        self.objects[key] = body

    async def get(self, key: str) -> bytes:
        try:
            return self.objects[key]
        except KeyError as exc:
            raise ProviderError("missing object") from exc

    async def delete(self, key: str) -> None:
        self.objects.pop(key, None)


class InMemoryDocumentStore:
    """Owner-scoped rows per collection, mirroring the Tortoise store."""

    def __init__(self):
        self.rows: Dict[CollectionKind, List[Dict[str, Any]]] = {kind: [] for kind in CollectionKind}
        self._next_id = 1

    def add(self, collection: CollectionKind, **fields: Any) -> int:
        row = dict(fields)
        row.setdefault("id", self._next_id)
        row.setdefault("created_at", datetime(2024, 5, 1, 9, 30))
        self._next_id = max(self._next_id, row["id"]) + 1
        self.rows[collection].append(row)
        return row["id"]

    async def insert(self, collection: CollectionKind, fields: Mapping[str, Any]) -> int:
        return self.add(collection, **fields)

    async def find_by_id(self, collection: CollectionKind, document_id: int, owner_id: str) -> Dict[str, Any]:
        for row in self.rows[collection]:
            if row["id"] == document_id and row["owner_id"] == owner_id:
                return dict(row)
        raise NotFound(f"No {collection.value} found for the provided ID")

    async def find_all_by_owner(
        self,
        collection: CollectionKind,
        owner_id: str,
        fields: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        rows = [row for row in self.rows[collection] if row["owner_id"] == owner_id]
        if fields:
            return [{name: row.get(name) for name in fields} for row in rows]
        return [dict(row) for row in rows]

    async def delete_by_id(self, collection: CollectionKind, document_id: int, owner_id: str) -> int:
        before = len(self.rows[collection])
        self.rows[collection] = [
            row
            for row in self.rows[collection]
            if not (row["id"] == document_id and row["owner_id"] == owner_id)
        ]
        return before - len(self.rows[collection])


def serialized(vector: List[float]) -> str:
    return json.dumps(vector)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def orchestrator(store, embedder, generator):
    return AnswerOrchestrator(
        retriever=Retriever(store),
        embedder=embedder,
        synthesizer=AnswerSynthesizer(generator, max_tokens=200),
        timeout_seconds=2.0,
    )
