from functools import lru_cache

from fastapi import Depends, Request

from studymate_shared import Providers, Settings, configure_logging, get_settings

from .services.answering import AnswerOrchestrator
from .services.generation import AnswerSynthesizer
from .services.ingestion import IngestionService
from .services.persistence import DocumentStore, StudentStore, TortoiseDocumentStore
from .services.retrieval import Retriever
from .services.storage import ObjectStore


@lru_cache(maxsize=1)
def init_logging() -> None:
    settings = get_settings()
    configure_logging(f"api::{settings.env}")


async def get_settings_dep() -> Settings:
    init_logging()
    return get_settings()


def get_providers(request: Request) -> Providers:
    return request.app.state.providers


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def get_document_store() -> DocumentStore:
    return TortoiseDocumentStore()


def get_student_store() -> StudentStore:
    return StudentStore()


def get_orchestrator(
    settings: Settings = Depends(get_settings_dep),
    providers: Providers = Depends(get_providers),
    store: DocumentStore = Depends(get_document_store),
) -> AnswerOrchestrator:
    return AnswerOrchestrator(
        retriever=Retriever(store),
        embedder=providers.embedder,
        synthesizer=AnswerSynthesizer(providers.generator, max_tokens=settings.generation_max_tokens),
        timeout_seconds=settings.provider_timeout_seconds,
        context_char_budget=settings.context_char_budget,
    )


def get_ingestion_service(
    settings: Settings = Depends(get_settings_dep),
    providers: Providers = Depends(get_providers),
    store: DocumentStore = Depends(get_document_store),
    object_store: ObjectStore = Depends(get_object_store),
) -> IngestionService:
    return IngestionService(
        store=store,
        object_store=object_store,
        embedder=providers.embedder,
        transcriber=providers.transcriber,
        synthesizer=AnswerSynthesizer(providers.generator, max_tokens=settings.generation_max_tokens),
        timeout_seconds=settings.provider_timeout_seconds,
    )
