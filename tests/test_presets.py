from core.models import EncodeOptions
from core.presets import BUILT_IN_PRESETS, apply_preset, format_preset_name


def test_explicit_label_wins():
    assert format_preset_name("general-hq") == "HQ 1080p"


def test_generated_labels():
    assert format_preset_name("device-iphone") == "iPhone"
    assert format_preset_name("mkv-hevc-remux-audio") == "HEVC Remux Audio"
    assert format_preset_name("web-youtube") == "Youtube"
    assert format_preset_name("custom-thing") == "Custom Thing"


def test_apply_preset_keeps_input():
    base = EncodeOptions(input="/in/a.mov")
    result = apply_preset("web-vp9", base)
    assert result.input == "/in/a.mov"
    assert result.format == "webm"
    assert result.codec == "vp9"
    assert result.audio_codec == "opus"


def test_unknown_preset_is_a_no_op():
    base = EncodeOptions(input="/in/a.mov")
    assert apply_preset("nope", base) is base


def test_every_preset_builds_valid_options():
    for name in BUILT_IN_PRESETS:
        assert isinstance(apply_preset(name, EncodeOptions(input="/a.mp4")), EncodeOptions)
