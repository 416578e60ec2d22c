"""
Widget behaviour on the offscreen platform: queue page controls, job card
actions and the details panel. Nothing is shown; modal dialogs are
avoided by keeping notifications off.
"""

import json
import os
import sys

import pytest
from PySide6.QtCore import QCoreApplication, QEvent

from core.config import Settings
from core.job_queue import JobQueue
from core.models import DownloadOptions, EncodeOptions, Job, JobStatus, TaskType
from ui.main_window import _SidePanel
from ui.pages import queue_page
from ui.pages._job_card import JobCard
from ui.pages.queue_page import QueuePage


def _dispose(*objects):
    for obj in objects:
        obj.deleteLater()
    QCoreApplication.sendPostedEvents(None, QEvent.Type.DeferredDelete)


@pytest.fixture
def page(supervisor):
    queue = JobQueue(
        supervisor=supervisor,
        settings=Settings(ffmpeg_path="/bin/ffmpeg", notify_on_complete=False),
    )
    p = QueuePage(lambda _name: None, queue)
    yield p
    _dispose(p, queue)


@pytest.fixture
def opened(monkeypatch):
    paths = []

    def fake_open(path):
        paths.append(path)
        return True

    monkeypatch.setattr(queue_page, "_open_local", fake_open)
    return paths


def _encode(name="a"):
    return EncodeOptions(input=f"/media/{name}.mov", format="mp4", codec="h264", audio_codec="none")


# =============================================================================
# Job card
# =============================================================================

def test_output_buttons_only_for_completed_jobs():
    job = Job(TaskType.ENCODE, _encode())
    card = JobCard(job)
    assert card._open_btn.isHidden()
    assert card._folder_btn.isHidden()

    job.status = JobStatus.FAILED
    card.refresh()
    assert card._open_btn.isHidden()

    job.status = JobStatus.COMPLETED
    job.output_path = "/media/a_encoded.mp4"
    card.refresh()
    assert not card._open_btn.isHidden()
    assert not card._folder_btn.isHidden()
    _dispose(card)


def test_output_buttons_emit_file_and_folder():
    job = Job(TaskType.ENCODE, _encode(), status=JobStatus.COMPLETED,
              output_path="/media/out/a_encoded.mp4")
    card = JobCard(job)
    files, folders = [], []
    card.open_requested.connect(files.append)
    card.folder_requested.connect(folders.append)
    card.expand()

    card._open_btn.click()
    card._folder_btn.click()

    assert files == ["/media/out/a_encoded.mp4"]
    assert folders == [os.path.dirname("/media/out/a_encoded.mp4")]
    _dispose(card)


# =============================================================================
# Queue page
# =============================================================================

def test_completed_card_opens_output(page, supervisor, opened):
    job = page.queue.enqueue(_encode("a"))
    page.queue.advance()
    supervisor.succeed()
    assert job.status == JobStatus.COMPLETED

    card = page._job_cards[job.id]
    assert not card._open_btn.isHidden()
    card._open_btn.click()
    card._folder_btn.click()

    assert opened == ["/media/a_encoded.mp4", os.path.dirname("/media/a_encoded.mp4")]


def test_stop_disabled_once_cleared_process_exits(page, supervisor):
    page.queue.enqueue(_encode("a"))
    page.queue.advance()
    assert page.stop_btn.isEnabled()

    page.queue.clear()
    # Still winding down
    assert page.stop_btn.isEnabled()

    supervisor.fail(-15)
    assert not page.stop_btn.isEnabled()


# =============================================================================
# Details panel
# =============================================================================

FFPROBE_JSON = {
    "streams": [{"codec_type": "video", "codec_name": "h264", "width": 1280, "height": 720}],
    "format": {"duration": "61.0", "bit_rate": "2000000"},
}


@pytest.mark.skipif(sys.platform == "win32", reason="shell script stands in for ffprobe")
def test_side_panel_shows_source_metadata(tmp_path):
    clip = tmp_path / "clip.mp4"
    clip.write_bytes(b"")
    fake = tmp_path / "ffprobe"
    fake.write_text(f"#!/bin/sh\ncat <<'JSON'\n{json.dumps(FFPROBE_JSON)}\nJSON\n")
    os.chmod(fake, 0o755)

    panel = _SidePanel(Settings(ffmpeg_path="/bin/ffmpeg", ffprobe_path=str(fake)))
    panel.show_job(Job(TaskType.ENCODE, EncodeOptions(input=str(clip))))

    assert panel._r_duration.value.text() == "00:01:01"
    assert panel._r_res.value.text() == "1280x720"
    assert panel._r_bitrate.value.text() == "2000 kb/s"
    _dispose(panel)


def test_side_panel_leaves_metadata_blank_for_downloads(tmp_path):
    panel = _SidePanel(Settings(ffmpeg_path="/bin/ffmpeg", ffprobe_path="/nonexistent/ffprobe"))
    panel.show_job(Job(TaskType.DOWNLOAD, DownloadOptions(url="https://example.com/a.m3u8",
                                                          output_dir=str(tmp_path))))

    assert panel._r_duration.value.text() == "—"
    assert panel._r_res.value.text() == "—"
    _dispose(panel)
