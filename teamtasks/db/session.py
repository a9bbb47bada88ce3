from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from teamtasks.core.config import settings

# PostgreSQL in deployments (asyncpg); tests point DATABASE_URL at aiosqlite
engine = create_async_engine(
    settings.DATABASE_URL,
    future=True,
    echo=settings.DATABASE_ECHO,
    pool_pre_ping=True,
)
SessionAsync = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
