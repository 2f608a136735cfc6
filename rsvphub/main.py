from fastapi import FastAPI, Request, APIRouter
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from rsvphub.api.v1.routes import rsvps as rsvps_router, public_rsvps as public_rsvps_router, health as health_router
from rsvphub.cache.redis_client import cache
from rsvphub.core.config import settings
from rsvphub.core.errors import RSVPError
from rsvphub.core.logging import logger
from rsvphub.db.session import engine, Base
from rsvphub.events import publisher
import rsvphub.db.models  # noqa: F401  register tables on Base.metadata

app = FastAPI(title="RSVP Hub")

# Public intake is the only rate-limited surface
app.state.limiter = public_rsvps_router.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RSVPError)
async def rsvp_error_handler(request: Request, exc: RSVPError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


api_router = APIRouter(prefix="/api/v1")
api_router.include_router(rsvps_router.router)
api_router.include_router(public_rsvps_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)

@app.on_event("startup")
async def on_startup():
    # create tables (simple approach for local runs; deployments use alembic)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("RSVP Hub started")

@app.on_event("shutdown")
async def on_shutdown():
    await cache.close()
    await publisher.close_connection()
    await engine.dispose()
