from __future__ import annotations

from tortoise import Tortoise

from studymate_shared import Settings


async def init_db(settings: Settings, *, generate_schemas: bool = True) -> None:
    await Tortoise.init(
        db_url=_normalize_dsn(settings.database_dsn),
        modules={"models": ["app.db.models"]},
    )
    if generate_schemas:
        await Tortoise.generate_schemas(safe=True)


async def close_db() -> None:
    await Tortoise.close_connections()


def _normalize_dsn(dsn: str) -> str:
    if dsn.startswith("postgresql+asyncpg://"):
        return dsn.replace("postgresql+asyncpg://", "postgres://", 1)
    return dsn
