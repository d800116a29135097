import re

from tubely.utils.media_files import generate_video_key


def test_keys_are_pairwise_distinct():
    keys = [generate_video_key("landscape") for _ in range(10_000)]
    assert len(set(keys)) == len(keys)


def test_key_is_folder_scoped_by_classification():
    key = generate_video_key("portrait")
    assert re.fullmatch(r"portrait/[0-9a-f]{64}\.mp4", key)


def test_key_without_classification():
    assert re.fullmatch(r"[0-9a-f]{64}\.mp4", generate_video_key())


def test_extension_is_normalised():
    assert generate_video_key("other", ext="webm").endswith(".webm")
    assert generate_video_key("other", ext=".mp4").endswith(".mp4")
