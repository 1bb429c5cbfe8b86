import logging
from typing import Optional

from app.core.config import Settings, settings as default_settings
from app.models.media import CaptionTrack
from app.utils.srt_utils import build_word_rate_cues

logger = logging.getLogger(__name__)


class SubtitleAligner:
    """Builds a caption track from the script text.

    Timing is estimated from a fixed speaking rate. When the caller knows how
    long the synthesized audio really is, the rate is stretched to fit it.
    """

    def __init__(self, settings: Settings = default_settings):
        self.words_per_cue = settings.subtitle_words_per_cue
        self.words_per_second = settings.subtitle_words_per_second

    def align(self, content: str, audio_duration: Optional[float] = None) -> CaptionTrack:
        word_count = len(content.split())
        rate = self.words_per_second
        synced = False
        if audio_duration and audio_duration > 0 and word_count:
            rate = word_count / audio_duration
            synced = True
            logger.info(f"Aligning {word_count} words to {audio_duration:.2f}s of audio ({rate:.2f} words/s)")

        cues = build_word_rate_cues(content, self.words_per_cue, rate)
        return CaptionTrack(cues=cues, synced=synced)
