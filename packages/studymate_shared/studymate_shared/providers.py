"""Clients for the embedding, generation and transcription providers.

Providers are plain objects built once at startup by :func:`build_providers`
and handed to the services that need them.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import requests
from openai import APITimeoutError, AsyncOpenAI, BadRequestError, OpenAIError

from .config import Settings
from .errors import ExtractionError, ProviderError, ProviderTimeout
from .schemas import Vector

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> Vector:
        ...


class GenerationProvider(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        ...


class Transcriber(Protocol):
    async def transcribe(self, audio: bytes, filename: str) -> str:
        ...


def _check_vector(vector: Vector, dimension: int) -> Vector:
    if len(vector) != dimension:
        raise ProviderError(f"Embedding has {len(vector)} components, expected {dimension}")
    return vector


class OpenAIEmbeddingProvider:
    """Embeds text with the OpenAI embeddings endpoint."""

    def __init__(self, client: AsyncOpenAI, *, model: str, dimension: int) -> None:
        self._client = client
        self._model = model
        self._dimension = dimension

    async def embed(self, text: str) -> Vector:
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty text")
        try:
            response = await self._client.embeddings.create(model=self._model, input=text)
        except APITimeoutError as exc:
            raise ProviderTimeout("Embedding request timed out") from exc
        except OpenAIError as exc:
            logger.warning("embedding request failed", extra={"error": str(exc)})
            raise ProviderError("Error generating embedding") from exc
        return _check_vector([float(value) for value in response.data[0].embedding], self._dimension)


class RemoteEmbeddingProvider:
    """Embeds text through a standalone embedding service over HTTP."""

    def __init__(self, base_url: str, *, model: str, dimension: int, timeout: float) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._dimension = dimension
        self._timeout = timeout

    async def embed(self, text: str) -> Vector:
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty text")

        def _post() -> Vector:
            payload = {"texts": [text], "model": self._model}
            try:
                response = requests.post(f"{self._base_url}/v1/embed", json=payload, timeout=self._timeout)
                response.raise_for_status()
            except requests.Timeout as exc:
                raise ProviderTimeout("Embedding service timed out") from exc
            except requests.RequestException as exc:
                logger.warning("embedding service request failed", extra={"error": str(exc)})
                raise ProviderError("Embedding service unavailable") from exc
            embeddings = response.json().get("embeddings", [])
            if not embeddings:
                raise ProviderError("Embedding service returned no vectors")
            return [float(value) for value in embeddings[0]]

        vector = await asyncio.to_thread(_post)
        return _check_vector(vector, self._dimension)


class OpenAIGenerationProvider:
    """Chat-completion client returning the raw completion text."""

    def __init__(self, client: AsyncOpenAI, *, model: str) -> None:
        self._client = client
        self._model = model

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
            )
        except APITimeoutError as exc:
            raise ProviderTimeout("Generation request timed out") from exc
        except OpenAIError as exc:
            logger.warning("generation request failed", extra={"error": str(exc)})
            raise ProviderError("Error generating response") from exc
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


class OpenAITranscriber:
    """Speech-to-text through the OpenAI audio transcription endpoint."""

    def __init__(self, client: AsyncOpenAI, *, model: str) -> None:
        self._client = client
        self._model = model

    async def transcribe(self, audio: bytes, filename: str) -> str:
        if not audio:
            raise ExtractionError("Uploaded audio was empty.")
        try:
            result = await self._client.audio.transcriptions.create(
                model=self._model,
                file=(filename or "audio", audio),
            )
        except BadRequestError as exc:
            raise ExtractionError("Audio could not be transcribed.") from exc
        except APITimeoutError as exc:
            raise ProviderTimeout("Transcription request timed out") from exc
        except OpenAIError as exc:
            logger.warning("transcription request failed", extra={"error": str(exc)})
            raise ProviderError("Error in transcription") from exc
        return (result.text or "").strip()


@dataclass
class Providers:
    embedder: EmbeddingProvider
    generator: GenerationProvider
    transcriber: Transcriber


def build_providers(settings: Settings, client: Optional[AsyncOpenAI] = None) -> Providers:
    """Construct provider clients from settings."""

    if client is None:
        if not settings.openai_api_key:
            raise ProviderError("OpenAI API key not configured")
        client = AsyncOpenAI(api_key=settings.openai_api_key, timeout=settings.provider_timeout_seconds)

    embedder: EmbeddingProvider
    if settings.embedding_backend == "remote":
        embedder = RemoteEmbeddingProvider(
            settings.embedding_service_url,
            model=settings.embedding_model,
            dimension=settings.embedding_dim,
            timeout=settings.provider_timeout_seconds,
        )
    else:
        embedder = OpenAIEmbeddingProvider(client, model=settings.embedding_model, dimension=settings.embedding_dim)

    return Providers(
        embedder=embedder,
        generator=OpenAIGenerationProvider(client, model=settings.openai_model),
        transcriber=OpenAITranscriber(client, model=settings.transcription_model),
    )
