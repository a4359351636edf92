import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from profile_photo.api.v1.routes import router as api_v1_router
from profile_photo.config import get_settings

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# Load environment variables from .env file
print("\n" + "="*60)
print("🔧 LOADING ENVIRONMENT CONFIGURATION")
print("="*60)

env_path = Path(__file__).parent.parent / ".env"
print(f"Looking for .env file at: {env_path}")

if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=True)
    print(f"✓ .env file loaded successfully")
else:
    print(f"⚠ .env file not found at: {env_path}")
    print(f"  Using built-in defaults (see profile_photo/config.py)")

print("="*60 + "\n")


def create_app() -> FastAPI:
    """
    Application factory for the Profile Photo API.

    Settings are read here once so a broken configuration fails at start-up
    rather than on the first upload.
    """
    settings = get_settings()
    logger.info(
        "Storing photos under %s%s (height %dpx, budget %d bytes)",
        settings.storage_root,
        settings.relative_dir,
        settings.target_height,
        settings.target_max_bytes,
    )

    app = FastAPI(
        title="Profile Photo API",
        version="0.1.0",
        description="Normalizes uploaded images into size-bounded JPEG profile photos.",
    )

    # Infrastructure-level health check (non-versioned) primarily for ops.
    @app.get("/health", tags=["health"])
    async def root_health_check() -> dict:
        """Simple root health check endpoint."""
        return {"status": "ok"}

    # Public, versioned API routes.
    app.include_router(api_v1_router)

    return app


app = create_app()
