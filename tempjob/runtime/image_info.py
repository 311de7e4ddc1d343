"""Loading of the JSON image descriptor produced by an image build."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import IO, Sequence, Union

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from .errors import ImageInfoError

logger = logging.getLogger(__name__)

ImageInfoSource = Union[str, os.PathLike, IO]


class ImageInfo(BaseModel):
    """The subset of the build descriptor this package relies on."""

    model_config = ConfigDict(extra="ignore")

    image: StrictStr


def parse_image_info(text: Union[str, bytes], source: str) -> str:
    """
    Validate an image descriptor and return its ``image`` field.

    Args:
        text: Raw JSON document. Bytes are decoded as UTF-8; a leading BOM is
            ignored for both bytes and text.
        source: Identifier of where the document came from, used in failure messages.

    Raises:
        ImageInfoError: When the document is not valid JSON, or its ``image``
            field is missing or not a string.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ImageInfoError(f"Failed to parse image info: {source}", source) from exc
    elif text.startswith("\ufeff"):
        text = text[1:]

    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ImageInfoError(f"Failed to parse image info: {source}", source) from exc

    if not isinstance(data, dict) or "image" not in data:
        raise ImageInfoError(f"Missing image field in image info: {source}", source)

    try:
        info = ImageInfo.model_validate(data)
    except ValidationError as exc:
        raise ImageInfoError(f"Bad image field in image info: {source}", source) from exc

    logger.debug("Loaded image %s from %s", info.image, source)
    return info.image


def read_image_info_file(source: ImageInfoSource) -> str:
    """Read an image descriptor from a path or an open file handle."""
    if hasattr(source, "read"):
        name = str(getattr(source, "name", source))
        try:
            text = source.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ImageInfoError(f"Failed to read image info file: {name}: {exc}", name) from exc
        return parse_image_info(text, name)

    path = Path(source)
    try:
        text = path.read_bytes()
    except OSError as exc:
        raise ImageInfoError(f"Failed to read image info file: {path}: {exc}", str(path)) from exc
    return parse_image_info(text, str(path))


def read_image_info_resource(name: str, roots: Sequence[Path]) -> str:
    """Resolve ``name`` against ``roots`` in order and read the first match."""
    for root in roots:
        candidate = Path(root) / name
        if candidate.is_file():
            source = candidate.resolve().as_uri()
            try:
                text = candidate.read_bytes()
            except OSError as exc:
                raise ImageInfoError(f"Failed to load image info: {source}", source) from exc
            return parse_image_info(text, source)

    searched = ", ".join(str(root) for root in roots) or "<no resource roots>"
    cause = FileNotFoundError(f"resource {name} not found in {searched}")
    raise ImageInfoError(f"Failed to load image info: {name}", name) from cause
