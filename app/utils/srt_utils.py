import logging
from typing import List

from app.models.media import Cue

logger = logging.getLogger(__name__)

WORDS_PER_CUE = 10
WORDS_PER_SECOND = 2.5

def parse_timestamp_to_ms(ts_str: str) -> int:
    """Converts an SRT timestamp string (HH:MM:SS,mmm) to milliseconds."""
    try:
        time_part, ms_part = ts_str.split(',')
        h, m, s = map(int, time_part.split(':'))
        return (h * 3600 * 1000) + (m * 60 * 1000) + (s * 1000) + int(ms_part)
    except ValueError:
        logger.warning(f"Malformed timestamp encountered: {ts_str}")
        return 0

def format_ms_to_timestamp(total_ms: int) -> str:
    """Converts milliseconds to an SRT timestamp string (HH:MM:SS,mmm)."""
    if total_ms < 0:
        logger.warning(f"Received negative milliseconds {total_ms}, clamping to 0.")
        total_ms = 0
    ms = total_ms % 1000
    total_seconds = total_ms // 1000
    s = total_seconds % 60
    total_minutes = total_seconds // 60
    m = total_minutes % 60
    h = total_minutes // 60
    return f"{h:02d}:{m:02d}:{s:02d},{ms:03d}"

def format_seconds_to_timestamp(seconds: float) -> str:
    return format_ms_to_timestamp(int(round(seconds * 1000)))

def chunk_words(text: str, max_words: int) -> List[str]:
    """Splits text on whitespace and regroups it into lines of at most `max_words` words."""
    words = text.split()
    return [" ".join(words[i:i + max_words]) for i in range(0, len(words), max_words)]

def build_word_rate_cues(
    text: str,
    words_per_cue: int = WORDS_PER_CUE,
    words_per_second: float = WORDS_PER_SECOND,
) -> List[Cue]:
    """
    Assigns each chunk of `words_per_cue` words a span at a constant speaking rate.

    Chunk k covers [k*n/rate, min((k+1)*n/rate, total/rate)] seconds, so the last
    cue always ends at total_words / rate.
    """
    if words_per_second <= 0:
        raise ValueError(f"words_per_second must be positive, got {words_per_second}")

    total_words = len(text.split())
    track_end = total_words / words_per_second
    cues = []
    for k, chunk in enumerate(chunk_words(text, words_per_cue)):
        start = (k * words_per_cue) / words_per_second
        end = min(((k + 1) * words_per_cue) / words_per_second, track_end)
        cues.append(Cue(index=k + 1, start=start, end=end, text=chunk))
    return cues

def render_srt(cues: List[Cue]) -> str:
    blocks = [
        f"{cue.index}\n{format_seconds_to_timestamp(cue.start)} --> {format_seconds_to_timestamp(cue.end)}\n{cue.text}"
        for cue in cues
    ]
    output = "\n\n".join(blocks)
    if output:
        output += "\n"
    return output

def parse_srt(content: str) -> List[Cue]:
    """Reads SRT text back into cues. Malformed blocks are skipped with a warning."""
    cues = []
    for block_str in content.strip().split('\n\n'):
        if not block_str.strip():
            continue
        lines = block_str.strip().split('\n')
        if len(lines) < 2 or not lines[0].strip().isdigit() or "-->" not in lines[1]:
            logger.warning(f"Skipping malformed SRT block: {block_str[:40]!r}")
            continue

        start_ts_str, end_ts_str = lines[1].split("-->")
        cues.append(Cue(
            index=int(lines[0].strip()),
            start=parse_timestamp_to_ms(start_ts_str.strip()) / 1000,
            end=parse_timestamp_to_ms(end_ts_str.strip()) / 1000,
            text="\n".join(lines[2:]),
        ))
    return cues
