"""Tests for shared file helpers."""
import re

from tubely.utils.files import random_file_name


def test_random_file_name_is_base64url_with_extension():
    name = random_file_name("mp4")
    stem, ext = name.rsplit(".", 1)
    assert ext == "mp4"
    # 32 random bytes -> 43 base64url chars, no padding
    assert re.fullmatch(r"[A-Za-z0-9_-]{43}", stem)


def test_random_file_names_differ():
    assert len({random_file_name("png") for _ in range(100)}) == 100
