import io
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
from PIL import Image

from app.core.config import Settings
from app.core.errors import RecordStoreError
from app.models.media import CompiledVideo, Slide, SlideSet
from app.models.video import ArtifactUrls, GenerationRequest, VideoRecord
from app.services.pipeline import PipelineDependencies, VideoPipeline
from app.services.subtitle_service import SubtitleAligner


class InMemoryVideoStore:
    """Record store double that keeps every write for inspection."""

    def __init__(self):
        self.records: Dict[str, VideoRecord] = {}
        self.writes: List[Tuple[str, VideoRecord]] = []

    async def insert(self, record: VideoRecord) -> VideoRecord:
        self.records[record.id] = record
        self.writes.append(("insert", record))
        return record

    async def update(self, record: VideoRecord) -> None:
        if record.id not in self.records:
            raise RecordStoreError(f"No video record found to update for id {record.id}.")
        self.records[record.id] = record
        self.writes.append(("update", record))

    async def get(self, video_id: str) -> Optional[VideoRecord]:
        return self.records.get(video_id)


def make_png(size=(64, 36), color=(200, 40, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        temp_dir_base=str(tmp_path / "temp-video-processing"),
        synthesis_retry_delay_s=0,
        supabase_url="",
        supabase_key="",
    )


@pytest.fixture
def store():
    return InMemoryVideoStore()


@pytest.fixture
def generation_request():
    return GenerationRequest(
        title="Demo",
        content="Hello world. This is a test.",
        voice_id="v1",
        auto_generate_images=True,
        owner_id="user-1",
    )


@pytest.fixture
def deps(store, test_settings):
    synthesizer = MagicMock()
    synthesizer.synthesize = AsyncMock(return_value=b"ID3-audio")

    slide_generator = MagicMock()
    slide_generator.generate = AsyncMock(return_value=SlideSet([
        Slide(image=make_png(), duration=3.0),
        Slide(image=make_png(color=(40, 40, 200)), duration=3.0),
    ]))

    compiler = MagicMock()
    compiler.compile = AsyncMock(return_value=CompiledVideo(data=b"mp4-bytes", duration=5.6))
    compiler.create_thumbnail = AsyncMock(return_value=b"jpeg-bytes")
    compiler.measure_audio = AsyncMock(return_value=None)
    compiler.cleanup = MagicMock(return_value=True)

    publisher = MagicMock()
    publisher.publish = AsyncMock(return_value=ArtifactUrls(
        video="https://cdn.example/videos/user-1/x/video.mp4",
        audio="https://cdn.example/audio/user-1/x/audio.mp3",
        subtitle="https://cdn.example/subtitles/user-1/x/subtitles.srt",
        thumbnail="https://cdn.example/thumbnails/user-1/x/thumbnail.jpg",
    ))

    return PipelineDependencies(
        store=store,
        publisher=publisher,
        synthesizer=synthesizer,
        slide_generator=slide_generator,
        aligner=SubtitleAligner(test_settings),
        compiler=compiler,
        settings=test_settings,
    )


@pytest.fixture
def pipeline(deps):
    return VideoPipeline(deps)


@pytest.fixture
def png_factory():
    return make_png
