from fastapi import APIRouter, Depends

from studymate_shared import CollectionKind, Settings

from ..dependencies import get_settings_dep

router = APIRouter(tags=["system"], prefix="/system")


@router.get("/health")
async def healthcheck() -> dict:
    return {"status": "ok"}


@router.get("/info")
async def service_info(settings: Settings = Depends(get_settings_dep)) -> dict:
    """Models and collections this deployment answers from."""

    return {
        "service": settings.service_name,
        "env": settings.env,
        "embedding_model": settings.embedding_model,
        "embedding_dim": settings.embedding_dim,
        "generation_model": settings.openai_model,
        "collections": [kind.value for kind in CollectionKind],
    }
