"""FastAPI application entry point."""
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (parent of server_py directory)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import get_settings
from core.logging import setup_logging, log_info
from middleware.logging import LoggingMiddleware

from api.v1 import story_tests, webhook

settings = get_settings()
setup_logging(getattr(logging, settings.log_level.upper(), logging.INFO))

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Generate validated TypeScript tests from user stories and GitHub issues"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

app.include_router(story_tests.router, prefix="/api")   # Interactive story -> test generation
app.include_router(webhook.router)                      # GitHub issue webhook


@app.on_event("startup")
async def startup_event():
    """Application startup event."""
    log_info(f"{settings.app_name} v{settings.app_version} starting", "app")
    log_info(f"Environment: {settings.environment}", "app")
    log_info(f"Workspace root: {settings.workspace_root}", "app")
    log_info(f"Server: http://{settings.host}:{settings.port}", "app")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event."""
    log_info("Application shutting down", "app")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level="info"
    )
