"""
Media inspection and fast-start rewriting via the ffprobe/ffmpeg command-line tools.
Both block until the tool exits or the timeout elapses; on timeout the child is killed.
"""
import json
import logging
import subprocess
from pathlib import Path

from tubely.errors import ExternalToolError

logger = logging.getLogger(__name__)

PROCESSED_SUFFIX = ".processed"
DEFAULT_TIMEOUT_SECONDS = 600

# Exact match on the ratio rounded to 2 decimals (16:9 and 9:16). No tolerance band.
PORTRAIT_RATIO = 0.56
LANDSCAPE_RATIO = 1.78


def _run_tool(cmd: list[str], timeout: float | None) -> subprocess.CompletedProcess:
    tool = cmd[0]
    try:
        result = subprocess.run(cmd, capture_output=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.error("%s timed out after %ss: %s", tool, timeout, cmd[-1])
        raise ExternalToolError(f"{tool} timed out")
    except FileNotFoundError:
        logger.error("%s not found; install FFmpeg to enable video processing", tool)
        raise ExternalToolError(f"{tool} not found")
    if result.returncode != 0:
        stderr = result.stderr.decode(errors="replace").strip() if result.stderr else ""
        logger.error("%s exited with %s for %s: %s", tool, result.returncode, cmd[-1], stderr)
        raise ExternalToolError(f"{tool} exited with code {result.returncode}")
    return result


def probe_video_dimensions(
    file_path: Path | str,
    ffprobe_bin: str = "ffprobe",
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
) -> tuple[int, int]:
    """Return (width, height) of the first video stream."""
    cmd = [
        ffprobe_bin,
        "-v", "error",
        "-select_streams", "v:0",
        "-show_entries", "stream=width,height",
        "-of", "json",
        str(file_path),
    ]
    result = _run_tool(cmd, timeout)
    try:
        stream = json.loads(result.stdout)["streams"][0]
        return int(stream["width"]), int(stream["height"])
    except (ValueError, KeyError, IndexError, TypeError) as e:
        logger.error("Unexpected ffprobe output for %s: %r", file_path, result.stdout[:200])
        raise ExternalToolError("Couldn't parse ffprobe output") from e


def classify_aspect_ratio(width: int, height: int) -> str:
    if height <= 0 or width <= 0:
        raise ExternalToolError(f"Invalid video dimensions {width}x{height}")
    ratio = round(width / height, 2)
    if ratio == PORTRAIT_RATIO:
        return "portrait"
    if ratio == LANDSCAPE_RATIO:
        return "landscape"
    return "other"


def get_video_aspect_ratio(
    file_path: Path | str,
    ffprobe_bin: str = "ffprobe",
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """Classify the video as "portrait", "landscape" or "other"."""
    width, height = probe_video_dimensions(file_path, ffprobe_bin=ffprobe_bin, timeout=timeout)
    return classify_aspect_ratio(width, height)


def processed_path_for(file_path: Path | str) -> Path:
    path = Path(file_path)
    return path.with_name(path.name + PROCESSED_SUFFIX)


def process_video_for_fast_start(
    file_path: Path | str,
    ffmpeg_bin: str = "ffmpeg",
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
) -> Path:
    """
    Move the moov atom to the front (stream copy, no re-encode) so playback can start
    before the whole file is downloaded. Writes <file_path>.processed and returns it.
    The input file is left in place.
    """
    output_path = processed_path_for(file_path)
    cmd = [
        ffmpeg_bin,
        "-y",
        "-i", str(file_path),
        "-movflags", "faststart",
        "-map_metadata", "0",
        "-codec", "copy",
        "-f", "mp4",
        str(output_path),
    ]
    _run_tool(cmd, timeout)
    logger.info("Fast-start rewrite completed for %s", file_path)
    return output_path
