# Copyright (c) 2026 Tunetint
# SPDX-License-Identifier: MIT

"""
Error taxonomy for the color pipeline.

No condition in the pipeline is fatal. These exceptions exist so that
collaborators (extractors, style surfaces, host surfaces) can signal a
specific failure, which the pipeline converts into an event, a log line
or a degenerate-but-valid result. None of them escape to the caller of
the event bus.
"""

from __future__ import annotations

from enum import Enum


class FailureReason(Enum):
    """Reason codes carried by ``colors:failed`` events."""

    TIMEOUT = "timeout"
    EXTRACTION_FAILED = "extraction_failed"
    PROCESSING_ERROR = "processing_error"
    NO_CONTENT = "no_content"


class TunetintError(Exception):
    """Base class for all pipeline errors."""


class ExtractionFailure(TunetintError):
    """Upstream palette extractor is unavailable, failed, or timed out.

    Recovered by keeping the last applied palette.
    """

    def __init__(self, reason: FailureReason, content_id: str | None = None, detail: str = ""):
        self.reason = reason
        self.content_id = content_id
        self.detail = detail
        message = f"{reason.value} for content {content_id!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DegenerateInput(TunetintError, ValueError):
    """Swatch input is empty or unusable.

    Raised by role selection when no candidate survives. The processor
    checks for candidates first and uses its neutral default palette, so
    this never escapes ``ColorProcessor.process``.
    """


class StaleResult(TunetintError):
    """A result from a superseded generation. Discarded, not an error."""

    def __init__(self, generation_id: int, current_generation_id: int):
        self.generation_id = generation_id
        self.current_generation_id = current_generation_id
        super().__init__(
            f"generation {generation_id} is older than {current_generation_id}"
        )


class ApplicationPartialFailure(TunetintError):
    """One variable in a batch could not be applied. The batch continues."""


class StyleWriteRejected(ApplicationPartialFailure):
    """Raised by a style surface that refuses a name or value."""

    def __init__(self, name: str, value: str, detail: str = ""):
        self.name = name
        self.value = value
        super().__init__(f"rejected {name}={value!r}" + (f": {detail}" if detail else ""))


class BridgeUnavailable(TunetintError):
    """The host's semantic color surface is not ready."""
