"""Icon processing with Pillow.

Icons are re-encoded as PNG before upload. With bleeding enabled, fully
transparent pixels take the average colour of their opaque neighbours so that
platform-side resizing does not produce dark fringes.
"""

from __future__ import annotations

import io
from collections import deque
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from rbxsync.domain.errors import ValidationError

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)

_NEIGHBOURS = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))


def alpha_bleed(image: Image.Image) -> Image.Image:
    """Return an RGBA copy of ``image`` with colour bled into transparent pixels.

    Works outward from the opaque region one ring at a time; bled pixels stay
    fully transparent but become sample sources for the next ring.
    """

    result = image.convert("RGBA")
    width, height = result.size
    pixels = result.load()
    if pixels is None:
        return result

    def neighbours(x: int, y: int) -> list[tuple[int, int]]:
        return [
            (x + dx, y + dy)
            for dx, dy in _NEIGHBOURS
            if 0 <= x + dx < width and 0 <= y + dy < height
        ]

    sampled: set[tuple[int, int]] = set()
    visited: set[tuple[int, int]] = set()
    for y in range(height):
        for x in range(width):
            if pixels[x, y][3] != 0:
                sampled.add((x, y))
                visited.add((x, y))

    frontier: deque[tuple[int, int]] = deque()
    for y in range(height):
        for x in range(width):
            if (x, y) in visited:
                continue
            if any(position in sampled for position in neighbours(x, y)):
                visited.add((x, y))
                frontier.append((x, y))

    while frontier:
        ring: list[tuple[int, int]] = []
        for _ in range(len(frontier)):
            x, y = frontier.popleft()
            red = green = blue = contributing = 0
            for position in neighbours(x, y):
                if position in sampled:
                    source = pixels[position]
                    red += source[0]
                    green += source[1]
                    blue += source[2]
                    contributing += 1
                elif position not in visited:
                    visited.add(position)
                    frontier.append(position)
            divisor = max(1, contributing)
            pixels[x, y] = (red // divisor, green // divisor, blue // divisor, 0)
            ring.append((x, y))
        sampled.update(ring)
    return result


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@dataclass(slots=True, frozen=True)
class PillowIconSource:
    """Load an icon file and produce the exact bytes that get uploaded."""

    bleed: bool = True

    def __call__(self, path: Path) -> bytes:
        try:
            with Image.open(path) as image:
                image.load()
                processed = alpha_bleed(image) if self.bleed else image.copy()
        except FileNotFoundError as exc:
            raise ValidationError(f"icon file not found: {path}", field="icon") from exc
        except (UnidentifiedImageError, OSError) as exc:
            raise ValidationError(f"cannot read icon {path}: {exc}", field="icon") from exc
        data = encode_png(processed)
        log.debug("Processed icon %s (%d bytes, bleed=%s)", path, len(data), self.bleed)
        return data


@dataclass(slots=True, frozen=True)
class FileIconStore:
    def write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        log.debug("Wrote icon %s (%d bytes)", path, len(data))
