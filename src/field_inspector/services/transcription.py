"""Voice note transcription with a canned-text fallback."""

import logging
import random
from dataclasses import dataclass, field
from typing import Protocol

from field_inspector.domain.media import Transcription

logger = logging.getLogger(__name__)

FALLBACK_TRANSCRIPTIONS: tuple[str, ...] = (
    "Inspección completada. La estructura se encuentra en buen estado general.",
    "Se detectaron fisuras menores en el muro norte, se recomienda seguimiento.",
    "Instalación eléctrica revisada, sin anomalías visibles en el tablero.",
    "Se observa humedad en la esquina sureste, revisar impermeabilización.",
    "Equipos de seguridad presentes y señalización en condiciones adecuadas.",
    "Corrosión leve en la estructura metálica, programar mantenimiento preventivo.",
    "Acceso despejado, iluminación suficiente y extintores vigentes.",
    "Daño superficial en el pavimento, no compromete la operación del área.",
    "Tuberías sin fugas aparentes, presión de agua dentro de lo esperado.",
    "Se requiere limpieza del área y retiro de material acumulado.",
)


class TranscriptionClient(Protocol):
    """Interface for a speech-to-text backend."""

    async def transcribe(
        self, *, audio: bytes, filename: str, mime_type: str, language: str
    ) -> str:
        """Return the text spoken in the audio."""


@dataclass
class TranscriptionService:
    """Transcribes audio, falling back to a random canned sentence."""

    client: TranscriptionClient | None
    language: str = "es"
    fallback_pool: tuple[str, ...] = FALLBACK_TRANSCRIPTIONS
    rng: random.Random = field(default_factory=random.Random)

    @property
    def external(self) -> bool:
        return self.client is not None

    async def transcribe(
        self, audio: bytes, mime_type: str | None, filename: str = "audio.wav"
    ) -> Transcription:
        """Transcribe a voice note; never raises."""
        if self.client is None:
            return self.fallback()
        try:
            text = await self.client.transcribe(
                audio=audio,
                filename=filename or "audio.wav",
                mime_type=mime_type or "audio/wav",
                language=self.language,
            )
        except Exception:
            logger.exception("Transcription failed, using fallback text")
            return self.fallback()
        return Transcription(text=text, real=True)

    def fallback(self) -> Transcription:
        """Pick one canned sentence uniformly at random."""
        return Transcription(text=self.rng.choice(self.fallback_pool), real=False)
