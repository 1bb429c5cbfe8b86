import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv() # Load variables from .env file

class Settings(BaseSettings):
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_key: str = os.getenv("SUPABASE_KEY", "")
    supabase_table_name: str = os.getenv("SUPABASE_TABLE_NAME", "video_records")

    # Storage buckets, one per artifact category
    video_bucket_name: str = os.getenv("VIDEO_BUCKET_NAME", "videos")
    audio_bucket_name: str = os.getenv("AUDIO_BUCKET_NAME", "audio")
    subtitle_bucket_name: str = os.getenv("SUBTITLE_BUCKET_NAME", "subtitles")
    thumbnail_bucket_name: str = os.getenv("THUMBNAIL_BUCKET_NAME", "thumbnails")

    temp_dir_base: str = os.path.join(os.getcwd(), "temp-video-processing")

    # Browser origins allowed to call the API, as a JSON list in CORS_ORIGINS
    cors_origins: List[str] = ["*"]

    # Text-to-speech (ElevenLabs)
    elevenlabs_api_key: str = os.getenv("ELEVENLABS_API_KEY", "")
    elevenlabs_base_url: str = os.getenv("ELEVENLABS_BASE_URL", "https://api.elevenlabs.io")
    elevenlabs_model_id: str = os.getenv("ELEVENLABS_MODEL_ID", "eleven_monolingual_v1")
    elevenlabs_timeout_s: Optional[float] = os.getenv("ELEVENLABS_TIMEOUT_S") # Unset means no timeout
    synthesis_max_attempts: int = os.getenv("SYNTHESIS_MAX_ATTEMPTS", 2) # 1 disables retries
    synthesis_retry_delay_s: float = os.getenv("SYNTHESIS_RETRY_DELAY_S", 2.0)

    # Slides
    slide_duration_s: float = os.getenv("SLIDE_DURATION_S", 3.0) # Display time per slide
    max_auto_slides: int = os.getenv("MAX_AUTO_SLIDES", 5)
    default_slide_count: int = os.getenv("DEFAULT_SLIDE_COUNT", 3)
    slide_caption_max_chars: int = os.getenv("SLIDE_CAPTION_MAX_CHARS", 50)
    slide_font_file: str = os.getenv("SLIDE_FONT_FILE", "")
    slide_font_size: int = os.getenv("SLIDE_FONT_SIZE", 56)

    # Subtitles
    subtitle_words_per_cue: int = os.getenv("SUBTITLE_WORDS_PER_CUE", 10)
    subtitle_words_per_second: float = os.getenv("SUBTITLE_WORDS_PER_SECOND", 2.5)
    subtitle_sync_to_audio: bool = os.getenv("SUBTITLE_SYNC_TO_AUDIO", False) # Rescale cues to the measured audio length

    # FFmpeg encoding settings
    default_video_duration_s: float = os.getenv("DEFAULT_VIDEO_DURATION_S", 120.0) # Used when ffprobe fails
    ffmpeg_preset: str = os.getenv("FFMPEG_PRESET", "fast")
    ffmpeg_crf: int = os.getenv("FFMPEG_CRF", 23)
    ffmpeg_audio_bitrate: str = os.getenv("FFMPEG_AUDIO_BITRATE", "192k")

    # Target video properties
    target_video_width: int = 1280
    target_video_height: int = 720
    target_fps: int = 30
    thumbnail_width: int = 640
    thumbnail_height: int = 360

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'

settings = Settings()
