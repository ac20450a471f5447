from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from studymate_shared import Settings, build_providers, configure_logging, get_settings

from .db import close_db, init_db
from .routers import audio, auth, chat, notes, papers, students, system
from .services.storage import S3ObjectStore
from .telemetry import setup_observability


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(f"api::{settings.env}")
    app.state.providers = build_providers(settings)
    app.state.object_store = S3ObjectStore.from_settings(settings)
    await init_db(settings)
    try:
        yield
    finally:
        await close_db()


def create_app() -> FastAPI:
    settings: Settings = get_settings()

    app = FastAPI(title="StudyMate API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_observability(app, settings)

    app.include_router(system.router)
    app.include_router(auth.router)
    app.include_router(audio.router)
    app.include_router(notes.router)
    app.include_router(papers.router)
    app.include_router(chat.router)
    app.include_router(students.router)

    @app.get("/")
    async def root() -> dict:
        return {"service": "studymate-api", "env": settings.env}

    return app


app = create_app()
