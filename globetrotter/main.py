from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from globetrotter.core.config import settings
from globetrotter.core.errors import register_exception_handlers
from globetrotter.core.init_db import init_db
from globetrotter.core.logger import logger
from globetrotter.core.rate_limit import setup_rate_limit
from globetrotter.core.cache import init_redis_client, close_redis
from globetrotter.routes import api_router

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.PROJECT_DESCRIPTION,
    openapi_url="/openapi.json"
)

# Rate limiting runs inside CORS so throttled responses still carry CORS headers
setup_rate_limit(app)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include all API routes
app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.APP_NAME} API"}


@app.get("/api/health")
async def health_check():
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event():
    await init_db()
    await init_redis_client()
    logger.info(f"{settings.APP_NAME} API started ({settings.ENVIRONMENT})")


@app.on_event("shutdown")
async def shutdown_event():
    await close_redis()
