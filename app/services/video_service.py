import asyncio
import io
import logging
import os
from typing import Optional

from PIL import Image

from app.core.config import Settings, settings as default_settings
from app.core.errors import CompileFailure, DurationProbeFailure, RenderFailure
from app.models.media import CompiledVideo, SlideSet
from app.utils.ffmpeg_utils import get_media_duration, run_ffmpeg_async
from app.utils.file_utils import cleanup_dir, ensure_dir, read_bytes, write_bytes

logger = logging.getLogger(__name__)


class VideoCompiler:
    """Encodes slides and narration into an MP4 inside a per-request scratch directory."""

    def __init__(self, settings: Settings = default_settings):
        self.settings = settings

    def workspace(self, request_id: str) -> str:
        return os.path.join(self.settings.temp_dir_base, request_id)

    async def _materialize_audio(self, request_id: str, audio: bytes) -> str:
        temp_dir = self.workspace(request_id)
        ensure_dir(temp_dir)
        audio_path = os.path.join(temp_dir, f"audio-{request_id}.mp3")
        if not os.path.exists(audio_path):
            await write_bytes(audio_path, audio)
        return audio_path

    async def measure_audio(self, request_id: str, audio: bytes) -> Optional[float]:
        """Measures the narration length. Returns None when ffprobe cannot tell."""
        audio_path = await self._materialize_audio(request_id, audio)
        try:
            return await get_media_duration(audio_path)
        except DurationProbeFailure as e:
            logger.warning(f"[{request_id}] Could not determine audio duration: {e}")
            return None

    def build_command(self, slide_paths: list[str], slide_duration: float, audio_path: str, output_path: str) -> list[str]:
        s = self.settings
        width, height = s.target_video_width, s.target_video_height

        ffmpeg_input_flags = []
        for slide_path in slide_paths:
            ffmpeg_input_flags.extend([
                '-loop', '1',
                '-framerate', str(s.target_fps),
                '-t', f"{slide_duration:g}",
                '-i', slide_path,
            ])
        audio_ffmpeg_index = len(slide_paths)
        ffmpeg_input_flags.extend(['-i', audio_path])

        # Fit every slide into the frame, then join them back to back
        scaled = [
            f"[{i}:v]scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2,setsar=1,fps={s.target_fps}[v{i}]"
            for i in range(len(slide_paths))
        ]
        concat_inputs = "".join(f"[v{i}]" for i in range(len(slide_paths)))
        filter_complex_string = ";".join(scaled) + (
            f";{concat_inputs}concat=n={len(slide_paths)}:v=1:a=0,format=yuv420p[out_v]"
        )

        return [
            *ffmpeg_input_flags,
            '-filter_complex', filter_complex_string,
            '-map', '[out_v]',
            '-map', f"{audio_ffmpeg_index}:a",
            '-c:v', 'libx264',
            '-preset', s.ffmpeg_preset,
            '-crf', str(s.ffmpeg_crf),
            '-pix_fmt', 'yuv420p',
            '-c:a', 'aac',
            '-b:a', s.ffmpeg_audio_bitrate,
            '-r', str(s.target_fps),
            '-shortest',
            '-y',
            output_path,
        ]

    async def compile(self, request_id: str, audio: bytes, slides: SlideSet) -> CompiledVideo:
        if not len(slides):
            raise CompileFailure("No slides to compile.")

        temp_dir = self.workspace(request_id)
        ensure_dir(temp_dir)

        audio_path = await self._materialize_audio(request_id, audio)
        slide_paths = []
        for i, slide in enumerate(slides):
            slide_path = os.path.join(temp_dir, f"slide-{i}-{request_id}.png")
            await write_bytes(slide_path, slide.image)
            slide_paths.append(slide_path)

        # Every slide shares the same interval
        slide_duration = slides.slides[0].duration
        output_path = os.path.join(temp_dir, f"video-{request_id}.mp4")
        ffmpeg_command = self.build_command(slide_paths, slide_duration, audio_path, output_path)

        success, _, stderr = await run_ffmpeg_async(ffmpeg_command, f"[{request_id}] Compile video")
        if not success:
            raise CompileFailure(f"Failed to compile video: {stderr.strip()[-1000:]}")

        try:
            duration = await get_media_duration(output_path)
        except DurationProbeFailure as e:
            duration = self.settings.default_video_duration_s
            logger.warning(f"[{request_id}] {e}. Falling back to {duration:.0f}s.")

        data = await read_bytes(output_path)
        logger.info(f"[{request_id}] Compiled {len(slides)} slides into {len(data)} bytes ({duration:.2f}s)")
        return CompiledVideo(data=data, duration=duration)

    async def create_thumbnail(self, image: bytes) -> bytes:
        return await asyncio.to_thread(self._thumbnail_blocking, image)

    def _thumbnail_blocking(self, image: bytes) -> bytes:
        try:
            with Image.open(io.BytesIO(image)) as source:
                thumb = source.convert("RGB")
                thumb.thumbnail((self.settings.thumbnail_width, self.settings.thumbnail_height))
                buffer = io.BytesIO()
                thumb.save(buffer, format="JPEG", quality=85)
        except (OSError, ValueError) as e:
            raise RenderFailure(f"Failed to create thumbnail: {e}") from e
        return buffer.getvalue()

    def cleanup(self, request_id: str) -> bool:
        """Removes the request's scratch files. Safe to call more than once."""
        return cleanup_dir(self.workspace(request_id))
