import asyncio
import logging

import aiohttp

from app.core.config import Settings, settings as default_settings
from app.core.errors import SynthesisFailure

logger = logging.getLogger(__name__)


class AudioSynthesizer:
    """Turns script text into MP3 bytes using the ElevenLabs text-to-speech API."""

    def __init__(self, settings: Settings = default_settings):
        self.api_key = settings.elevenlabs_api_key
        self.base_url = settings.elevenlabs_base_url.rstrip("/")
        self.model_id = settings.elevenlabs_model_id
        self.timeout = settings.elevenlabs_timeout_s

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        if not text or not text.strip():
            raise SynthesisFailure("Cannot synthesize empty content.")

        url = f"{self.base_url}/v1/text-to-speech/{voice_id}"
        headers = {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
        }

        logger.info(f"Requesting speech for {len(text)} characters with voice {voice_id}")
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(url, json=payload, headers=headers) as response:
                    if response.status < 200 or response.status >= 300:
                        message = await response.text()
                        logger.error(f"Text-to-speech failed (Status: {response.status}): {message}")
                        raise SynthesisFailure(
                            f"Text-to-speech provider returned {response.status}: {message}",
                            status=response.status,
                        )
                    audio = await response.read()
        except aiohttp.ClientError as e:
            logger.error(f"Error calling text-to-speech provider: {e}")
            raise SynthesisFailure(f"Text-to-speech request failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Text-to-speech request timed out after {self.timeout} seconds")
            raise SynthesisFailure(f"Text-to-speech request timed out after {self.timeout} seconds") from e

        logger.info(f"Received {len(audio)} bytes of audio")
        return audio
