from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import NullPool
from globetrotter.core.config import settings

db_url = settings.DATABASE_URL

# SQLite connections are cheap and must not be shared across event loops
engine_options = {"poolclass": NullPool} if db_url.startswith("sqlite") else {}

engine = create_async_engine(db_url, echo=False, **engine_options)
SessionLocal = sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession
)

Base = declarative_base()


async def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        await db.close()
