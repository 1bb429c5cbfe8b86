import pytest

from app.services.subtitle_service import SubtitleAligner
from app.utils.srt_utils import parse_srt


@pytest.fixture
def aligner(test_settings):
    return SubtitleAligner(test_settings)


def test_align_defaults_to_word_rate(aligner):
    content = " ".join(f"w{i}" for i in range(23))
    track = aligner.align(content)

    assert not track.synced
    assert len(track.cues) == 3
    assert track.end == pytest.approx(23 / 2.5)


def test_align_always_produces_a_cue_for_non_empty_content(aligner):
    track = aligner.align("Hi")
    assert len(track.cues) == 1
    assert track.cues[0].text == "Hi"


def test_align_stretches_to_audio_duration(aligner):
    content = " ".join("word" for _ in range(20))
    track = aligner.align(content, audio_duration=16.0)

    assert track.synced
    assert [(c.start, c.end) for c in track.cues] == [(0.0, 8.0), (8.0, 16.0)]


def test_align_ignores_unusable_audio_duration(aligner):
    track = aligner.align("a b c d e", audio_duration=0)
    assert not track.synced
    assert track.end == pytest.approx(2.0)


def test_to_srt_is_parseable(aligner):
    track = aligner.align("Hello world. This is a test.")
    srt = track.to_srt()

    assert srt.startswith("1\n00:00:00,000 --> 00:00:02,400\n")
    assert parse_srt(srt)[0].text == "Hello world. This is a test."
