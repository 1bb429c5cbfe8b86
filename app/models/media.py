from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Slide:
    image: bytes  # PNG
    duration: float  # seconds on screen


@dataclass
class SlideSet:
    slides: List[Slide] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.slides)

    def __iter__(self):
        return iter(self.slides)

    @property
    def images(self) -> List[bytes]:
        return [slide.image for slide in self.slides]

    @property
    def total_duration(self) -> float:
        return sum(slide.duration for slide in self.slides)


@dataclass(frozen=True)
class Cue:
    index: int  # 1-based
    start: float  # seconds
    end: float
    text: str


@dataclass
class CaptionTrack:
    cues: List[Cue] = field(default_factory=list)
    synced: bool = False  # True when timing came from the synthesized audio

    @property
    def end(self) -> float:
        return self.cues[-1].end if self.cues else 0.0

    def to_srt(self) -> str:
        from app.utils.srt_utils import render_srt
        return render_srt(self.cues)


@dataclass(frozen=True)
class CompiledVideo:
    data: bytes
    duration: float  # measured from the encoded file
