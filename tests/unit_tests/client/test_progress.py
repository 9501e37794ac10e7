import pytest

from cloudbox_client.progress import ProgressBody, UploadProgressTracker


def test_tracker_starts_unknown():
    tracker = UploadProgressTracker("a.txt")
    assert tracker.percent is None
    assert tracker.active


def test_tracker_reports_integer_percentages_once_each():
    tracker = UploadProgressTracker()
    seen = []
    tracker.subscribe(seen.append)

    tracker.update(0, 300)
    tracker.update(1, 300)
    tracker.update(100, 300)
    tracker.update(101, 300)
    tracker.update(300, 300)

    assert seen == [0, 33, 34, 100]
    assert tracker.percent == 100


def test_zero_length_upload_is_complete():
    tracker = UploadProgressTracker()
    tracker.update(0, 0)
    assert tracker.percent == 100


def test_abandon_stops_reporting():
    tracker = UploadProgressTracker("big.mp4")
    seen = []
    tracker.subscribe(seen.append)
    tracker.update(10, 100)

    tracker.abandon()
    tracker.update(90, 100)

    assert seen == [10]
    assert tracker.percent == 10
    assert not tracker.active


def test_finish_clears_listeners():
    tracker = UploadProgressTracker()
    seen = []
    tracker.subscribe(seen.append)
    tracker.finish()
    tracker.update(1, 1)
    assert seen == []


def test_progress_body_streams_in_chunks():
    tracker = UploadProgressTracker()
    seen = []
    tracker.subscribe(seen.append)
    body = ProgressBody(b"x" * 10, tracker, chunk_size=4)

    chunks = list(body)

    assert len(body) == 10
    assert chunks == [b"xxxx", b"xxxx", b"xx"]
    assert seen == [0, 40, 80, 100]


def test_progress_body_without_tracker():
    assert b"".join(ProgressBody(b"abc", chunk_size=2)) == b"abc"


def test_progress_body_rejects_bad_chunk_size():
    with pytest.raises(ValueError):
        ProgressBody(b"abc", chunk_size=0)
