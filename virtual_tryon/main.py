import logging
from typing import Optional

from fastapi import FastAPI

from virtual_tryon.api.routes.tryon import router as tryon_router
from virtual_tryon.core.config import Settings, get_settings
from virtual_tryon.core.log import setup_logging
from virtual_tryon.services.gemini import GeminiClient
from virtual_tryon.services.session import TryOnSession

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, session: Optional[TryOnSession] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="Virtual Try-On", version="1.0.0")
    app.state.session = session or TryOnSession(settings, GeminiClient(settings))
    app.include_router(tryon_router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    logger.info("virtual try-on ready, model=%s", settings.gemini_model)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
