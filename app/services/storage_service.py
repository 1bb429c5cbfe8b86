import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from supabase import Client

from app.core.config import Settings, settings as default_settings
from app.core.errors import PublishFailure
from app.models.video import ArtifactUrls

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactKind:
    name: str  # field on ArtifactUrls
    file_name: str
    content_type: str


VIDEO = ArtifactKind("video", "video.mp4", "video/mp4")
AUDIO = ArtifactKind("audio", "audio.mp3", "audio/mpeg")
SUBTITLE = ArtifactKind("subtitle", "subtitles.srt", "text/plain; charset=utf-8")
THUMBNAIL = ArtifactKind("thumbnail", "thumbnail.jpg", "image/jpeg")

# Upload order
ARTIFACT_KINDS = (VIDEO, AUDIO, SUBTITLE, THUMBNAIL)


def artifact_path(owner_id: str, request_id: str, kind: ArtifactKind) -> str:
    return f"{owner_id}/{request_id}/{kind.file_name}"


class ArtifactPublisher:
    """Uploads finished artifacts to Supabase Storage, one bucket per category."""

    def __init__(self, client: Client, settings: Settings = default_settings):
        self.client = client
        self.buckets: Dict[str, str] = {
            VIDEO.name: settings.video_bucket_name,
            AUDIO.name: settings.audio_bucket_name,
            SUBTITLE.name: settings.subtitle_bucket_name,
            THUMBNAIL.name: settings.thumbnail_bucket_name,
        }

    async def publish(
        self,
        request_id: str,
        owner_id: str,
        video: Optional[bytes] = None,
        audio: Optional[bytes] = None,
        subtitle: Optional[bytes] = None,
        thumbnail: Optional[bytes] = None,
    ) -> ArtifactUrls:
        """Uploads each present artifact and returns their public URLs.

        Stops at the first failed upload by raising PublishFailure.
        """
        payloads = {VIDEO.name: video, AUDIO.name: audio, SUBTITLE.name: subtitle, THUMBNAIL.name: thumbnail}
        urls = ArtifactUrls()
        for kind in ARTIFACT_KINDS:
            data = payloads[kind.name]
            if data is None:
                continue
            url = await self._upload(request_id, owner_id, kind, data)
            setattr(urls, kind.name, url)
        return urls

    async def _upload(self, request_id: str, owner_id: str, kind: ArtifactKind, data: bytes) -> str:
        bucket_name = self.buckets[kind.name]
        destination_path = artifact_path(owner_id, request_id, kind)
        logger.info(f"[{request_id}] Uploading {kind.name} ({len(data)} bytes) to {bucket_name}/{destination_path}")
        try:
            bucket = self.client.storage.from_(bucket_name)
            await asyncio.to_thread(
                bucket.upload,
                path=destination_path,
                file=data,
                file_options={"content-type": kind.content_type, "upsert": "true"},
            )
            public_url = await asyncio.to_thread(bucket.get_public_url, destination_path)
        except Exception as e:
            logger.error(f"[{request_id}] Failed to upload {kind.name} to {bucket_name}/{destination_path}: {e}")
            raise PublishFailure(f"Failed to upload {kind.name}: {e}", artifact=kind.name) from e

        if not public_url:
            raise PublishFailure(f"No public URL returned for {kind.name}.", artifact=kind.name)
        logger.info(f"[{request_id}] Uploaded {kind.name}. Public URL: {public_url}")
        return public_url
