import asyncio
import colorsys
import io
import logging
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from app.core.config import Settings, settings as default_settings
from app.core.errors import RenderFailure
from app.models.media import Slide, SlideSet

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

HUE_STEP_DEGREES = 60
DEFAULT_GRADIENT: Tuple[Color, Color] = ((30, 60, 114), (42, 82, 152))

FONT_CANDIDATES: Sequence[str] = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/System/Library/Fonts/Supplemental/Arial Bold.ttf",
    "C:/Windows/Fonts/arialbd.ttf",
)


def split_segments(content: str) -> List[str]:
    """Sentence-like segments: split on '.', stripped, blanks dropped."""
    return [segment.strip() for segment in content.split(".") if segment.strip()]


def truncate_caption(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + "..."


def gradient_for_index(index: int) -> Tuple[Color, Color]:
    """Top and bottom colors for slide `index`; the hue turns 60 degrees per slide."""
    hue = ((index * HUE_STEP_DEGREES) % 360) / 360.0
    top = colorsys.hsv_to_rgb(hue, 0.65, 0.85)
    bottom = colorsys.hsv_to_rgb((hue + 30 / 360.0) % 1.0, 0.75, 0.45)
    return (
        tuple(int(c * 255) for c in top),
        tuple(int(c * 255) for c in bottom),
    )


def _resolve_font(size: int, font_file: str = "") -> ImageFont.ImageFont:
    """Attempt to load a truetype font, falling back to Pillow's bundled font."""
    candidates = ([font_file] if font_file else []) + list(FONT_CANDIDATES)
    for path in candidates:
        try:
            return ImageFont.truetype(path, size=size)
        except (OSError, IOError):
            continue
    return ImageFont.load_default(size=size)


def _wrap_text(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, max_width: int) -> List[str]:
    words = text.split()
    if not words:
        return []
    lines = []
    current_line = words[0]
    for word in words[1:]:
        test_line = f"{current_line} {word}"
        left, _, right, _ = draw.textbbox((0, 0), test_line, font=font)
        if (right - left) <= max_width:
            current_line = test_line
        else:
            lines.append(current_line)
            current_line = word
    lines.append(current_line)
    return lines


class SlideGenerator:
    def __init__(self, settings: Settings = default_settings):
        self.size = (settings.target_video_width, settings.target_video_height)
        self.slide_duration = settings.slide_duration_s
        self.max_slides = settings.max_auto_slides
        self.default_count = settings.default_slide_count
        self.caption_max_chars = settings.slide_caption_max_chars
        self.font_file = settings.slide_font_file
        self.font_size = settings.slide_font_size

    async def generate(self, content: str, auto_generate_images: bool) -> SlideSet:
        return await asyncio.to_thread(self._generate_blocking, content, auto_generate_images)

    def _generate_blocking(self, content: str, auto_generate_images: bool) -> SlideSet:
        captions: List[Optional[str]] = []
        gradients: List[Tuple[Color, Color]] = []

        if auto_generate_images:
            segments = split_segments(content)[:self.max_slides]
            if not segments:
                logger.warning("No sentence segments found in content, using default slides.")
            for i, segment in enumerate(segments):
                captions.append(truncate_caption(segment, self.caption_max_chars))
                gradients.append(gradient_for_index(i))

        if not captions:
            captions = [None] * self.default_count
            gradients = [DEFAULT_GRADIENT] * self.default_count

        try:
            images = [self._render(caption, gradient) for caption, gradient in zip(captions, gradients)]
        except (OSError, ValueError, MemoryError) as e:
            raise RenderFailure(f"Failed to render slide image: {e}") from e

        logger.info(f"Rendered {len(images)} slides (auto={auto_generate_images})")
        return SlideSet([Slide(image=image, duration=self.slide_duration) for image in images])

    def _render(self, caption: Optional[str], gradient: Tuple[Color, Color]) -> bytes:
        width, height = self.size
        top, bottom = gradient
        image = Image.new("RGB", self.size, color=top)
        draw = ImageDraw.Draw(image)

        for y in range(height):
            ratio = y / height
            color = tuple(int(top[c] + (bottom[c] - top[c]) * ratio) for c in range(3))
            draw.line([(0, y), (width, y)], fill=color)

        if caption:
            font = _resolve_font(self.font_size, self.font_file)
            lines = _wrap_text(draw, caption, font, int(width * 0.8))
            line_boxes = [draw.textbbox((0, 0), line, font=font) for line in lines]
            line_height = max(box[3] - box[1] for box in line_boxes) + 12
            y = (height - line_height * len(lines)) // 2
            for line, box in zip(lines, line_boxes):
                x = (width - (box[2] - box[0])) // 2
                draw.text((x + 2, y + 2), line, font=font, fill=(0, 0, 0))
                draw.text((x, y), line, font=font, fill=(255, 255, 255))
                y += line_height

        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
