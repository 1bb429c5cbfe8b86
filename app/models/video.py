from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field

from app.core.errors import ValidationError


class VideoStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerateVideoRequest(BaseModel):
    """Incoming JSON payload. Accepts the camelCase names the web client sends."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    content: Optional[str] = None
    voice_id: Optional[str] = Field(default=None, alias="voiceId")
    auto_generate_images: bool = Field(default=False, alias="autoGenerateImages")
    user_id: Optional[str] = Field(default=None, alias="userId")

    def to_generation_request(self) -> "GenerationRequest":
        """Validates required fields once and returns the immutable request the pipeline consumes."""
        required = {
            "title": self.title,
            "content": self.content,
            "voiceId": self.voice_id,
            "userId": self.user_id,
        }
        missing = [name for name, value in required.items() if not value or not value.strip()]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        return GenerationRequest(
            title=self.title.strip(),
            content=self.content.strip(),
            voice_id=self.voice_id.strip(),
            auto_generate_images=self.auto_generate_images,
            owner_id=self.user_id.strip(),
        )


class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    content: str
    voice_id: str
    auto_generate_images: bool
    owner_id: str


class ArtifactUrls(BaseModel):
    video: str = ""
    audio: str = ""
    subtitle: str = ""
    thumbnail: str = ""


class VideoMetadata(BaseModel):
    word_count: int = 0
    estimated_duration_seconds: float = 0.0
    image_count: int = 0
    synced_subtitles: bool = False
    error_detail: Optional[str] = None


class VideoRecord(BaseModel):
    """Status record for one generation request, as stored in the `video_records` table."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    owner_id: str
    title: str
    status: VideoStatus = VideoStatus.PROCESSING
    duration: str = "0:00"
    artifact_urls: ArtifactUrls = Field(default_factory=ArtifactUrls)
    metadata: VideoMetadata = Field(default_factory=VideoMetadata)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None


class GenerateVideoResponse(BaseModel):
    success: bool = True
    message: str
    video_id: str
    video: VideoRecord


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: datetime
