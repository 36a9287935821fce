"""
API Gateway application.

Mounts the generation, composition and health routes and serves generated
media under /generated.
"""

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from shared.config import settings
from shared.logging import get_logger
from modules.composer.config import GENERATED_URL_PREFIX, generated_root
from api_gateway.routes import compose, health, videos

logger = get_logger(__name__)

app = FastAPI(
    title="Broadcast Generator API",
    description="Satirical news broadcast generation pipeline",
    version="1.0.0"
)

app.include_router(health.router)
app.include_router(videos.router, prefix="/api")
app.include_router(compose.router, prefix="/api")

generated_dir = generated_root()
generated_dir.mkdir(parents=True, exist_ok=True)
app.mount(GENERATED_URL_PREFIX, StaticFiles(directory=str(generated_dir)), name="generated")

logger.info(
    "API gateway started",
    extra={"environment": settings.environment, "generated_dir": str(generated_dir)}
)
