from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import logging
import uvicorn # For running programmatically
from dotenv import load_dotenv # For loading .env file
import os # For path manipulation

from onesync.core.config import settings
from onesync.core.logging import setup_logging
from onesync.api import (
    analytics,
    artists,
    auth,
    earnings,
    integrations,
    jobs,
    mastering,
    notifications,
    payments,
    payouts,
    releases,
    support,
    tracks,
    uploads,
    users,
)
# Every model module is imported so the relationship and foreign key targets resolve
from onesync.models import (  # noqa: F401
    analytics as analytics_model,
    artist,
    background_job,
    payment,
    release,
    royalty_advance,
    track,
    user,
    withdrawal,
)


# Configure logging
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger("onesync")

app = FastAPI(title="OneSync API")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Anything that is not an HTTPException ends up here
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "path": request.url.path
        }
    )

# Include routes
app.include_router(auth.router, prefix="/api", tags=["Authentication"])
app.include_router(users.router, prefix="/api", tags=["Profile"])
app.include_router(artists.router, prefix="/api", tags=["Artists"])
app.include_router(releases.router, prefix="/api", tags=["Releases"])
app.include_router(tracks.router, prefix="/api", tags=["Tracks"])
app.include_router(uploads.router, prefix="/api", tags=["Uploads"])
app.include_router(analytics.router, prefix="/api", tags=["Analytics"])
app.include_router(integrations.router, prefix="/api", tags=["Integrations"])
app.include_router(payments.router, prefix="/api", tags=["Payments"])
app.include_router(payouts.router, prefix="/api", tags=["Payouts"])
app.include_router(earnings.router, prefix="/api", tags=["Earnings"])
app.include_router(notifications.router, prefix="/api", tags=["Notifications"])
app.include_router(support.router, prefix="/api", tags=["Support"])
app.include_router(mastering.router, prefix="/api", tags=["Mastering"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["Jobs"])

# Uploaded audio, artwork and avatars
app.mount(
    settings.STORAGE_PUBLIC_URL,
    StaticFiles(directory=settings.STORAGE_ROOT, check_dir=False),
    name="storage",
)


@app.get("/")
async def root():
    return {"message": "Welcome to OneSync API"}


@app.get("/api/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    # For deployment, use 0.0.0.0 and PORT from the environment or .env
    load_dotenv()
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("onesync.main:app", host="0.0.0.0", port=port, log_level="info")
