"""Models for photo uploads and transcriptions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PhotoUpload:
    """Outcome of a photo upload."""

    url: str
    stored: bool


@dataclass(frozen=True)
class Transcription:
    """Transcribed text and whether the real engine produced it."""

    text: str
    real: bool
