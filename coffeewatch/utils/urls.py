"""Signed preview tokens."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import urlencode

from itsdangerous import BadData, URLSafeTimedSerializer

PREVIEW_SALT = "preview"


class InvalidToken(ValueError):
    pass


def _serializer(secret: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret_key=secret, salt=PREVIEW_SALT)


def sign_images(images: Sequence[str], secret: str) -> str:
    return _serializer(secret).dumps({"images": list(images)})


def load_images(token: str, secret: str, max_age: int | None = None) -> list[str]:
    try:
        data = _serializer(secret).loads(token, max_age=max_age)
    except BadData as exc:
        raise InvalidToken(str(exc)) from exc
    images = data.get("images") if isinstance(data, dict) else None
    if not isinstance(images, list) or not all(isinstance(url, str) for url in images):
        raise InvalidToken("Token payload has no image list")
    return images


def preview_link(preview_url: str, images: Sequence[str], secret: str) -> str:
    return f"{preview_url}?{urlencode({'payload': sign_images(images, secret)})}"
