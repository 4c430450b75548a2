import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from storydesk import cloud, storage
from storydesk.cloud import SupabaseClient
from storydesk.identity import DEFAULT_API_URL, IdentityClient
from storydesk.routes import router

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def create_app(data_dir: Path | None = None) -> FastAPI:
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    storage.init_storage(resolved)

    supabase_url = os.getenv("SUPABASE_URL", "")
    supabase_key = os.getenv("SUPABASE_KEY", "")
    if supabase_url and supabase_key:
        cloud.init_cloud(SupabaseClient(supabase_url, supabase_key))
    else:
        logger.info("SUPABASE_URL/SUPABASE_KEY not set; cloud storage disabled")
        cloud.init_cloud(None)

    app = FastAPI(title="Storydesk")

    # Without a secret key every caller is anonymous (local store only).
    secret_key = os.getenv("CLERK_SECRET_KEY", "")
    app.state.identity = (
        IdentityClient(secret_key, os.getenv("CLERK_API_URL", DEFAULT_API_URL))
        if secret_key
        else None
    )
    app.state.webhook_secret = os.getenv("CLERK_WEBHOOK_SECRET") or None

    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR env var or default)
app = create_app()
