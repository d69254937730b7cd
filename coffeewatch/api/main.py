"""FastAPI application serving the signed product preview image."""

from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse, Response

from coffeewatch.config import Settings, load_settings
from coffeewatch.logic.preview import PreviewRenderError, PreviewRenderer
from coffeewatch.utils.urls import InvalidToken, load_images

logger = logging.getLogger(__name__)

app = FastAPI(title="coffeewatch preview")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_renderer(settings: Settings = Depends(get_settings)) -> PreviewRenderer:
    return PreviewRenderer(settings)


@app.get("/")
async def preview(
    payload: str | None = Query(None),
    settings: Settings = Depends(get_settings),
    renderer: PreviewRenderer = Depends(get_renderer),
) -> Response:
    if not payload:
        raise HTTPException(status_code=400, detail="Missing token")
    try:
        images = load_images(payload, settings.signing_secret, max_age=settings.token_max_age)
    except InvalidToken as exc:
        logger.info("Rejected preview token: %s", exc)
        raise HTTPException(status_code=400, detail="Invalid token") from exc
    try:
        rendered = await renderer.render(images)
    except PreviewRenderError as exc:
        logger.warning("Preview render failed: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return Response(content=rendered.content, media_type=rendered.media_type)


@app.get("/healthz")
async def healthz() -> JSONResponse:
    return JSONResponse({"status": "ok"})
