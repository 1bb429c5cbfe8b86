"""
Unit tests for the ffmpeg/ffprobe wrappers
Tests subprocess handling without requiring an FFmpeg installation
"""

from unittest.mock import AsyncMock, patch

import pytest

from app.core.errors import DurationProbeFailure
from app.utils.ffmpeg_utils import get_media_duration, run_ffmpeg_async


def _process(returncode=0, stdout=b"", stderr=b""):
    process = AsyncMock()
    process.returncode = returncode
    process.communicate = AsyncMock(return_value=(stdout, stderr))
    return process


@pytest.mark.asyncio
@patch("asyncio.create_subprocess_exec")
async def test_run_ffmpeg_async_success(mock_subprocess):
    mock_subprocess.return_value = _process(0, b"out", b"")

    success, stdout, _ = await run_ffmpeg_async(["-i", "in.png", "out.mp4"], "test")

    assert success
    assert stdout == "out"
    assert mock_subprocess.call_args[0][:2] == ("ffmpeg", "-i")


@pytest.mark.asyncio
@patch("asyncio.create_subprocess_exec")
async def test_run_ffmpeg_async_failure_returns_stderr(mock_subprocess):
    mock_subprocess.return_value = _process(1, b"", b"Invalid data found")

    success, _, stderr = await run_ffmpeg_async(["-i", "bad"], "test")

    assert not success
    assert stderr == "Invalid data found"


@pytest.mark.asyncio
@patch("asyncio.create_subprocess_exec", side_effect=PermissionError("not executable"))
async def test_run_ffmpeg_async_reports_spawn_failure(mock_subprocess):
    success, stdout, stderr = await run_ffmpeg_async(["-i", "in.png", "out.mp4"], "test")

    assert not success
    assert stdout == ""
    assert "not executable" in stderr


@pytest.mark.asyncio
@patch("asyncio.create_subprocess_exec")
async def test_get_media_duration_parses_seconds(mock_subprocess):
    mock_subprocess.return_value = _process(0, b"12.480000\n")

    assert await get_media_duration("video.mp4") == pytest.approx(12.48)
    assert mock_subprocess.call_args[0][0] == "ffprobe"


@pytest.mark.asyncio
@patch("asyncio.create_subprocess_exec")
async def test_get_media_duration_raises_on_nonzero_exit(mock_subprocess):
    mock_subprocess.return_value = _process(1, b"", b"No such file")

    with pytest.raises(DurationProbeFailure, match="No such file"):
        await get_media_duration("missing.mp4")


@pytest.mark.asyncio
@patch("asyncio.create_subprocess_exec")
async def test_get_media_duration_raises_on_non_numeric_output(mock_subprocess):
    mock_subprocess.return_value = _process(0, b"N/A\n")

    with pytest.raises(DurationProbeFailure, match="non-numeric"):
        await get_media_duration("video.mp4")


@pytest.mark.asyncio
@patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("ffprobe"))
async def test_get_media_duration_raises_when_binary_missing(mock_subprocess):
    with pytest.raises(DurationProbeFailure):
        await get_media_duration("video.mp4")
