from __future__ import annotations

import logging
import os

from fastapi import FastAPI

from extraction.extractor import default_registry
from extraction.registry import RuleRegistry

from portfolio_extractor.routers.extract import router as extract_router


logger = logging.getLogger("portfolio-extractor")


def create_app(registry: RuleRegistry | None = None) -> FastAPI:
    app = FastAPI(title="Portfolio Statement Extractor")
    app.state.registry = registry if registry is not None else default_registry()
    logger.debug("registered extractors: %s", [e.name for e in app.state.registry])

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    def version() -> dict[str, str]:
        return {
            "name": "portfolio-extractor",
            "version": os.getenv("VERSION", "dev"),
            "gitSha": os.getenv("GIT_SHA", "unknown"),
            "buildTime": os.getenv("BUILD_TIME", "unknown"),
        }

    app.include_router(extract_router)

    return app


app = create_app()
