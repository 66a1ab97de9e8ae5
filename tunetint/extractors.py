# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Upstream collaborators: swatch extractors and analysis providers.

The router depends only on the two protocols here. Reference adapters:

- ``StaticSwatchExtractor``: swatches from a mapping (tests, CLI JSON input)
- ``ImageSwatchExtractor``: swatches from artwork files via Pillow
- ``StaticAnalysisProvider``: a fixed (replaceable) analysis snapshot
"""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from typing import Callable, Mapping, Optional, Protocol, Union, runtime_checkable

import numpy as np
from numpy.typing import NDArray

from tunetint.errors import ExtractionFailure, FailureReason
from tunetint.schema import MusicAnalysisSnapshot, RawSwatch, RawSwatchSet

logger = logging.getLogger(__name__)


@runtime_checkable
class SwatchExtractor(Protocol):
    """Produces raw swatches for a piece of content. May be slow or fail."""

    async def extract_swatches(self, content_id: str) -> RawSwatchSet: ...


@runtime_checkable
class AnalysisProvider(Protocol):
    """Best-effort audio analysis; always returns a snapshot."""

    def get_current_analysis(self) -> MusicAnalysisSnapshot: ...


class StaticSwatchExtractor:
    """
    Swatches from an in-memory mapping.

    Args:
        swatch_sets: content id → RawSwatchSet
        delays: content id → seconds to wait before answering (simulates a
            slow extractor)
    """

    def __init__(
        self,
        swatch_sets: Optional[Mapping[str, RawSwatchSet]] = None,
        delays: Optional[Mapping[str, float]] = None,
    ):
        self.swatch_sets: dict[str, RawSwatchSet] = dict(swatch_sets or {})
        self.delays: dict[str, float] = dict(delays or {})
        self.calls: list[str] = []

    async def extract_swatches(self, content_id: str) -> RawSwatchSet:
        self.calls.append(content_id)
        delay = self.delays.get(content_id, 0.0)
        if delay > 0:
            await asyncio.sleep(delay)
        try:
            return self.swatch_sets[content_id]
        except KeyError:
            raise ExtractionFailure(
                FailureReason.NO_CONTENT, content_id, "no swatches registered"
            ) from None


class StaticAnalysisProvider:
    """Returns ``snapshot``; assign a new one to simulate changing playback."""

    def __init__(self, snapshot: Optional[MusicAnalysisSnapshot] = None):
        self.snapshot = snapshot or MusicAnalysisSnapshot()

    def get_current_analysis(self) -> MusicAnalysisSnapshot:
        return self.snapshot


# =============================================================================
# Image extraction
# =============================================================================


def swatches_from_pixels(
    pixels: NDArray[np.uint8],
    content_id: str,
    *,
    n_swatches: int = 8,
    quantize_bits: int = 5,
) -> RawSwatchSet:
    """
    Mode-based swatches from an (H, W, 3) or (N, 3) uint8 array.

    Pixels are quantized to ``quantize_bits`` per channel so near-identical
    photo pixels share a bin; each bin reports its mean color and pixel
    count. Bins are ordered by count (ties by color), most common first.

    Raises:
        ValueError: If the array is not RGB uint8
    """
    pixels = np.asarray(pixels)
    if pixels.dtype != np.uint8 or pixels.shape[-1] != 3:
        raise ValueError(f"Expected uint8 RGB pixels, got {pixels.dtype} {pixels.shape}")
    if not 1 <= quantize_bits <= 8:
        raise ValueError(f"quantize_bits must be 1-8, got {quantize_bits}")

    flat = pixels.reshape(-1, 3)
    if len(flat) == 0:
        return RawSwatchSet.empty(content_id)

    shift = 8 - quantize_bits
    keys = flat >> shift
    bins, inverse, counts = np.unique(keys, axis=0, return_inverse=True, return_counts=True)
    inverse = inverse.reshape(-1)

    sums = np.zeros((len(bins), 3), dtype=np.float64)
    np.add.at(sums, inverse, flat.astype(np.float64))
    means = np.round(sums / counts[:, None]).astype(int)

    # np.unique sorts bins lexicographically, so a stable sort on -count
    # breaks ties by color
    order = np.argsort(-counts, kind="stable")[:n_swatches]
    swatches = tuple(
        RawSwatch(rgb=tuple(int(v) for v in means[i]), population=float(counts[i]))
        for i in order
    )
    return RawSwatchSet(content_id=content_id, swatches=swatches)


def load_image_pixels(path: Union[str, Path], max_pixels: int = 256 * 256) -> NDArray[np.uint8]:
    """
    Load an image as sRGB uint8 pixels, downsampled to at most ``max_pixels``.

    Embedded ICC profiles are converted to sRGB when possible.

    Raises:
        ImportError: If Pillow is not installed
        OSError: If the file cannot be read
    """
    try:
        from PIL import Image, ImageCms
    except ImportError as e:
        raise ImportError(
            "Pillow is required for image extraction. "
            "Install with: pip install tunetint[image]"
        ) from e

    with Image.open(path) as img:
        if "icc_profile" in img.info:
            try:
                embedded = ImageCms.ImageCmsProfile(io.BytesIO(img.info["icc_profile"]))
                srgb = ImageCms.createProfile("sRGB")
                img = ImageCms.profileToProfile(img.convert("RGB"), embedded, srgb)
            except (OSError, ImageCms.PyCMSError) as exc:
                logger.debug("ICC conversion failed for %s (%s); using raw RGB", path, exc)
        if img.mode != "RGB":
            img = img.convert("RGB")

        width, height = img.size
        if max_pixels > 0 and width * height > max_pixels:
            scale = (max_pixels / (width * height)) ** 0.5
            size = (max(1, int(width * scale)), max(1, int(height * scale)))
            img = img.resize(size, Image.Resampling.LANCZOS)
        return np.array(img, dtype=np.uint8)


class ImageSwatchExtractor:
    """
    Swatches from artwork image files.

    Args:
        resolve: content id → image path (a mapping or a callable)
        n_swatches: Maximum swatches per image
        max_pixels: Downsampling target before counting
    """

    def __init__(
        self,
        resolve: Union[Mapping[str, Union[str, Path]], Callable[[str], Union[str, Path]]],
        *,
        n_swatches: int = 8,
        max_pixels: int = 256 * 256,
    ):
        self._resolve = resolve
        self.n_swatches = n_swatches
        self.max_pixels = max_pixels

    def _path_for(self, content_id: str) -> Path:
        try:
            if callable(self._resolve):
                path = self._resolve(content_id)
            else:
                path = self._resolve[content_id]
        except KeyError:
            raise ExtractionFailure(
                FailureReason.NO_CONTENT, content_id, "no artwork for content"
            ) from None
        return Path(path)

    def _extract(self, content_id: str) -> RawSwatchSet:
        path = self._path_for(content_id)
        try:
            pixels = load_image_pixels(path, self.max_pixels)
        except OSError as exc:
            raise ExtractionFailure(
                FailureReason.EXTRACTION_FAILED, content_id, f"{path}: {exc}"
            ) from exc
        swatches = swatches_from_pixels(pixels, content_id, n_swatches=self.n_swatches)
        logger.debug("Extracted %d swatches from %s", len(swatches), path)
        return swatches

    async def extract_swatches(self, content_id: str) -> RawSwatchSet:
        # Decoding is blocking; keep it off the event loop
        return await asyncio.to_thread(self._extract, content_id)
