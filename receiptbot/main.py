import logging
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI

from receiptbot import __version__
from receiptbot.api.routes import router as api_router
from receiptbot.config import Settings
from receiptbot.pipeline.factory import build_pipeline
from receiptbot.pipeline.receipt_pipeline import ReceiptPipeline

logger = logging.getLogger(__name__)


def create_app(pipeline: Optional[ReceiptPipeline] = None, settings: Optional[Settings] = None) -> FastAPI:
    app = FastAPI(
        title="Receipt Expense Service",
        description="API for turning receipt photos into structured expense drafts.",
        version=__version__,
    )

    if pipeline is None:
        pipeline = build_pipeline(settings or Settings.from_env())
    app.state.pipeline = pipeline
    logger.info("✅ App initialization successful")

    @app.get("/health", tags=["health"])
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


def run() -> None:
    """Start the API server (PORT and HOST come from the environment)."""
    port_env = os.environ.get("PORT", "8000")
    try:
        port = int(port_env)
    except ValueError:
        logger.warning(f"⚠️ Invalid PORT value: {port_env}, using default 8000")
        port = 8000
    uvicorn.run("receiptbot.main:app", host=os.environ.get("HOST", "0.0.0.0"), port=port)


if __name__ == "__main__":
    run()
