"""
Run the aspect classification and fast-start rewrite on a local file.

    python scripts/debug_ffprobe.py <path-to-video>
"""
import sys

from tubely.config import get_settings
from tubely.services.media import get_video_aspect_ratio, process_video_for_fast_start


def main(argv: list[str]) -> int:
    if len(argv) < 2:
        print("Usage: python scripts/debug_ffprobe.py <path-to-video>", file=sys.stderr)
        return 1
    settings = get_settings()
    path = argv[1]
    timeout = settings.media_tool_timeout_seconds
    print("aspect ratio:", get_video_aspect_ratio(path, ffprobe_bin=settings.ffprobe_bin, timeout=timeout))
    print("processed:", process_video_for_fast_start(path, ffmpeg_bin=settings.ffmpeg_bin, timeout=timeout))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
