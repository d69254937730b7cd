"""Composite preview image of the available products."""

from __future__ import annotations

import asyncio
import base64
import functools
import io
import logging
from dataclasses import dataclass
from typing import Sequence

import httpx
from PIL import Image, ImageOps, UnidentifiedImageError

from coffeewatch.config import Settings

logger = logging.getLogger(__name__)

WHITE_1PX_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAwMCAO+ip1sAAAAASUVORK5CYII="
)
BACKGROUND = (255, 255, 255, 255)
MEDIA_TYPES = {
    "AVIF": "image/avif",
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}


class PreviewRenderError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class RenderedImage:
    content: bytes
    media_type: str


def canvas_size(count: int, tile: int, spacing: int) -> tuple[int, int]:
    return tile * count + spacing * (count + 1), tile + 2 * spacing


def tile_position(index: int, tile: int, spacing: int) -> tuple[int, int]:
    return spacing + index * (tile + spacing), spacing


class ImageTransformer:
    """Chainable resize/pad, draw and encode operations over a Pillow image."""

    def __init__(self, image: Image.Image) -> None:
        self.image = image

    @classmethod
    def input(cls, data: bytes) -> "ImageTransformer":
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise PreviewRenderError(f"Unreadable image data: {exc}") from exc
        return cls(image.convert("RGBA"))

    def transform(self, *, width: int, height: int, fit: str = "pad") -> "ImageTransformer":
        if fit != "pad":
            raise ValueError(f"Unsupported fit {fit!r}")
        resized = ImageOps.pad(self.image, (width, height), method=Image.Resampling.LANCZOS, color=BACKGROUND)
        return ImageTransformer(resized)

    def draw(self, overlay: "ImageTransformer", *, left: int, top: int) -> "ImageTransformer":
        canvas = self.image.copy()
        canvas.alpha_composite(overlay.image, dest=(left, top))
        return ImageTransformer(canvas)

    def output(self, *, format: str) -> RenderedImage:
        fmt = format.upper()
        Image.init()
        if fmt not in MEDIA_TYPES or fmt not in Image.SAVE:
            raise PreviewRenderError(f"Output format {format!r} is not supported by this Pillow build")
        buffer = io.BytesIO()
        self.image.convert("RGB").save(buffer, format=fmt)
        return RenderedImage(content=buffer.getvalue(), media_type=MEDIA_TYPES[fmt])


class PreviewRenderer:
    def __init__(self, settings: Settings, *, session: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._session = session
        self.tile = settings.tile_size * settings.pixel_ratio
        self.spacing = settings.tile_spacing * settings.pixel_ratio

    async def render(self, image_urls: Sequence[str]) -> RenderedImage:
        loop = asyncio.get_running_loop()
        width, height = canvas_size(len(image_urls), self.tile, self.spacing)
        composite = await loop.run_in_executor(None, self._blank_canvas, width, height)
        if self._session is not None:
            composite = await self._compose(self._session, composite, image_urls)
        else:
            async with httpx.AsyncClient(follow_redirects=True) as session:
                composite = await self._compose(session, composite, image_urls)
        return await loop.run_in_executor(None, functools.partial(composite.output, format=self.settings.image_format))

    async def _compose(
        self, session: httpx.AsyncClient, composite: ImageTransformer, image_urls: Sequence[str]
    ) -> ImageTransformer:
        loop = asyncio.get_running_loop()
        # Each draw depends on the previous canvas, so fetches stay sequential.
        for index, url in enumerate(image_urls):
            data = await self._fetch(session, url)
            composite = await loop.run_in_executor(None, self._draw_tile, composite, data, index, url)
        logger.info("Composited %s images", len(image_urls))
        return composite

    @staticmethod
    def _blank_canvas(width: int, height: int) -> ImageTransformer:
        return ImageTransformer.input(WHITE_1PX_PNG).transform(width=width, height=height, fit="pad")

    def _draw_tile(self, composite: ImageTransformer, data: bytes, index: int, url: str) -> ImageTransformer:
        try:
            tile = ImageTransformer.input(data).transform(width=self.tile, height=self.tile, fit="pad")
        except PreviewRenderError as exc:
            raise PreviewRenderError(f"Failed to decode image: {url}") from exc
        left, top = tile_position(index, self.tile, self.spacing)
        return composite.draw(tile, left=left, top=top)

    async def _fetch(self, session: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await session.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise PreviewRenderError(f"Failed to fetch image: {url}") from exc
        if not response.content:
            raise PreviewRenderError(f"Failed to fetch image: {url}")
        return response.content
