import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Protocol

from supabase import Client

from app.core.config import Settings, settings as default_settings
from app.core.errors import RecordStoreError, SynthesisFailure
from app.models.video import (
    ArtifactUrls,
    GenerationRequest,
    VideoMetadata,
    VideoRecord,
    VideoStatus,
)
from app.services.slide_service import SlideGenerator
from app.services.storage_service import ArtifactPublisher
from app.services.subtitle_service import SubtitleAligner
from app.services.supabase_service import SupabaseVideoStore
from app.services.tts_service import AudioSynthesizer
from app.services.video_service import VideoCompiler

logger = logging.getLogger(__name__)


class VideoStore(Protocol):
    async def insert(self, record: VideoRecord) -> VideoRecord: ...
    async def update(self, record: VideoRecord) -> None: ...
    async def get(self, video_id: str) -> Optional[VideoRecord]: ...


@dataclass
class PipelineDependencies:
    """Everything the pipeline talks to, handed in explicitly at startup."""
    store: VideoStore
    publisher: ArtifactPublisher
    synthesizer: AudioSynthesizer
    slide_generator: SlideGenerator
    aligner: SubtitleAligner
    compiler: VideoCompiler
    settings: Settings = field(default_factory=lambda: default_settings)


def format_duration(seconds: float) -> str:
    """Seconds as M:SS; minutes are not capped at 59."""
    total = max(0, int(round(seconds)))
    return f"{total // 60}:{total % 60:02d}"


def count_words(content: str) -> int:
    return len(content.split())


class VideoPipeline:
    """Runs one narrated-video generation from submission to a terminal record.

    A record is written twice: `submit` inserts it as processing, and `run`
    makes a single terminal update to completed or failed. Scratch files for
    the request are removed on every exit path of `run`.
    """

    def __init__(self, deps: PipelineDependencies):
        self.deps = deps
        self.store = deps.store
        self.settings = deps.settings

    async def submit(self, request: GenerationRequest) -> VideoRecord:
        word_count = count_words(request.content)
        record = VideoRecord(
            owner_id=request.owner_id,
            title=request.title,
            status=VideoStatus.PROCESSING,
            metadata=VideoMetadata(
                word_count=word_count,
                estimated_duration_seconds=round(word_count / self.settings.subtitle_words_per_second, 2),
            ),
        )
        created = await self.store.insert(record)
        logger.info(f"[{created.id}] Initial video record created for user {request.owner_id}")
        return created

    async def get(self, video_id: str) -> Optional[VideoRecord]:
        return await self.store.get(video_id)

    async def run(self, record: VideoRecord, request: GenerationRequest) -> VideoRecord:
        """The background task performing the video generation. Never raises."""
        start_time = time.monotonic()
        video_id = record.id
        logger.info(f"[{video_id}] Starting video generation: '{request.title}'")

        try:
            final_record = await self._generate(record, request)
            await self.store.update(final_record)
            logger.info(
                f"[{video_id}] Video generation completed in {time.monotonic() - start_time:.1f}s "
                f"(duration {final_record.duration})"
            )
            return final_record
        except Exception as e:
            logger.exception(f"[{video_id}] Error during video generation task: {e}")
            failed_record = record.model_copy(update={
                "status": VideoStatus.FAILED,
                "artifact_urls": ArtifactUrls(),
                "metadata": record.metadata.model_copy(update={"error_detail": str(e)}),
            })
            try:
                await self.store.update(failed_record)
            except RecordStoreError as store_error:
                logger.error(f"[{video_id}] Could not record failure: {store_error}")
            return failed_record
        finally:
            await self.cleanup(video_id)

    async def _generate(self, record: VideoRecord, request: GenerationRequest) -> VideoRecord:
        d = self.deps
        video_id = record.id

        audio = await self._synthesize(video_id, request)
        logger.info(f"[{video_id}] Audio synthesized ({len(audio)} bytes)")

        slides = await d.slide_generator.generate(request.content, request.auto_generate_images)
        logger.info(f"[{video_id}] {len(slides)} slides ready")

        audio_duration = None
        if self.settings.subtitle_sync_to_audio:
            audio_duration = await d.compiler.measure_audio(video_id, audio)
        captions = d.aligner.align(request.content, audio_duration)
        logger.info(f"[{video_id}] {len(captions.cues)} subtitle cues generated (synced={captions.synced})")

        compiled = await d.compiler.compile(video_id, audio, slides)
        thumbnail = await d.compiler.create_thumbnail(slides.images[0])

        urls = await d.publisher.publish(
            video_id,
            request.owner_id,
            video=compiled.data,
            audio=audio,
            subtitle=captions.to_srt().encode("utf-8"),
            thumbnail=thumbnail,
        )

        return record.model_copy(update={
            "status": VideoStatus.COMPLETED,
            "duration": format_duration(compiled.duration),
            "artifact_urls": urls,
            "metadata": record.metadata.model_copy(update={
                "image_count": len(slides),
                "synced_subtitles": captions.synced,
                "error_detail": None,
            }),
            "completed_at": datetime.now(timezone.utc),
        })

    async def _synthesize(self, video_id: str, request: GenerationRequest) -> bytes:
        attempts = max(1, self.settings.synthesis_max_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return await self.deps.synthesizer.synthesize(request.content, request.voice_id)
            except SynthesisFailure as e:
                if attempt == attempts or not e.is_transient:
                    raise
                logger.warning(f"[{video_id}] Synthesis attempt {attempt}/{attempts} failed: {e}. Retrying.")
                await asyncio.sleep(self.settings.synthesis_retry_delay_s)

    async def cleanup(self, request_id: str) -> None:
        """Removes transient files for the request; a second call is a no-op."""
        await asyncio.to_thread(self.deps.compiler.cleanup, request_id)


def build_pipeline(client: Client, settings: Settings = default_settings) -> VideoPipeline:
    return VideoPipeline(PipelineDependencies(
        store=SupabaseVideoStore(client, settings.supabase_table_name),
        publisher=ArtifactPublisher(client, settings),
        synthesizer=AudioSynthesizer(settings),
        slide_generator=SlideGenerator(settings),
        aligner=SubtitleAligner(settings),
        compiler=VideoCompiler(settings),
        settings=settings,
    ))
