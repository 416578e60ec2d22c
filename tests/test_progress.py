from core.progress import ProgressParser, hhmmss_to_seconds

BANNER = (
    "Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'in.mp4':\n"
    "  Duration: 00:01:40.00, start: 0.000000, bitrate: 1205 kb/s\n"
)


def _status(time, speed="1.95x"):
    return (
        f"frame= 1200 fps= 48 q=28.0 size=    2048kB time={time} "
        f"bitrate= 335.5kbits/s speed={speed}"
    )


def test_duration_then_position_gives_percent():
    parser = ProgressParser()
    assert parser.feed(BANNER) is None
    assert parser.duration == 100.0

    event = parser.feed(_status("00:00:50.00"))
    assert event.percent == 50
    assert event.elapsed == "00:00:50"
    assert event.speed == "1.95x"


def test_percent_is_floored():
    parser = ProgressParser()
    parser.feed(BANNER)
    assert parser.feed(_status("00:00:33.99")).percent == 33


def test_percent_never_reaches_100():
    parser = ProgressParser()
    parser.feed(BANNER)
    assert parser.feed(_status("00:01:40.00")).percent == 99
    assert parser.feed(_status("00:02:30.00")).percent == 99


def test_first_duration_wins():
    parser = ProgressParser()
    parser.feed(BANNER)
    parser.feed("  Duration: 00:00:10.00, start: 0.000000")
    assert parser.duration == 100.0


def test_without_duration_no_percent():
    parser = ProgressParser()
    event = parser.feed(_status("00:00:05.00"))
    assert event is not None
    assert event.percent is None
    assert event.elapsed == "00:00:05"


def test_missing_speed_uses_default():
    parser = ProgressParser()
    parser.feed(BANNER)
    event = parser.feed("size=  100kB time=00:00:10.00 bitrate=N/A")
    assert event.percent == 10
    assert event.speed == "0.00x"


def test_last_status_line_in_chunk_wins():
    parser = ProgressParser()
    chunk = BANNER + _status("00:00:10.00", "1.0x") + "\r" + _status("00:00:20.00", "2.0x")
    event = parser.feed(chunk)
    assert event.percent == 20
    assert event.speed == "2.0x"


def test_unmatched_chunks_are_ignored():
    parser = ProgressParser()
    for chunk in ("", "Stream mapping:", "time=N/A", "Duration: N/A, bitrate: N/A", "garbage=\x00"):
        assert parser.feed(chunk) is None
    assert parser.duration == 0.0


def test_reset_forgets_duration():
    parser = ProgressParser()
    parser.feed(BANNER)
    parser.reset()
    assert parser.feed(_status("00:00:50.00")).percent is None


def test_hhmmss_to_seconds():
    assert hhmmss_to_seconds("01:02:03.5") == 3723.5
    assert hhmmss_to_seconds("bad") == 0.0
