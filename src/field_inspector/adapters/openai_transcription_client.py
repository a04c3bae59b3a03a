"""OpenAI audio transcription client."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from field_inspector.services.transcription import TranscriptionClient


@dataclass
class OpenAITranscriptionClient(TranscriptionClient):
    """Transcription client backed by the OpenAI audio API."""

    client: AsyncOpenAI
    model: str = "whisper-1"

    @classmethod
    def create(
        cls, api_key: str, model: str = "whisper-1"
    ) -> "OpenAITranscriptionClient":
        """Create an OpenAI transcription client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def transcribe(
        self, *, audio: bytes, filename: str, mime_type: str, language: str
    ) -> str:
        """Submit audio and return the plain-text transcript."""
        response = await self.client.audio.transcriptions.create(
            file=(filename, audio, mime_type),
            model=self.model,
            language=language,
            response_format="text",
        )
        text = response if isinstance(response, str) else getattr(response, "text", "")
        if not text:
            raise RuntimeError("OpenAI returned an empty transcription")
        return text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
