from core.models import EncodeOptions
from core.scanner import encode_options_for_folder, find_video_files


def _touch(folder, *names):
    for name in names:
        (folder / name).write_bytes(b"")


def test_find_video_files_filters_and_sorts(tmp_path):
    _touch(tmp_path, "b.MKV", "a.mp4", "notes.txt", "cover.jpg")
    (tmp_path / "nested.mov").mkdir()
    assert [f.name for f in find_video_files(tmp_path)] == ["a.mp4", "b.MKV"]


def test_find_video_files_missing_folder(tmp_path):
    assert find_video_files(tmp_path / "missing") == []


def test_encode_options_for_folder(tmp_path):
    _touch(tmp_path, "clip1.mov", "clip1_encoded.mp4", "clip2.mkv")
    template = EncodeOptions(input="", codec="h265", crf=20)

    options = encode_options_for_folder(tmp_path, template)

    assert [o.input for o in options] == [
        str(tmp_path / "clip1.mov"), str(tmp_path / "clip2.mkv"),
    ]
    assert all(o.codec == "h265" and o.crf == 20 for o in options)


def test_encode_options_for_folder_respects_custom_suffix(tmp_path):
    _touch(tmp_path, "a.mov", "a_small.mp4", "b_encoded.mp4")
    template = EncodeOptions(input="", output_suffix="_small")
    names = [o.input.rsplit("/", 1)[-1] for o in encode_options_for_folder(tmp_path, template)]
    assert names == ["a.mov", "b_encoded.mp4"]
