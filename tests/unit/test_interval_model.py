from datetime import UTC, datetime, timedelta

import pytest

from wink.errors import ValidationError
from wink.features.availability.domain.models import (
    BlockKind,
    ClassifiedBlock,
    FreeWindow,
    TimeInterval,
)


def _dt(hour: int, minute: int = 0) -> datetime:
    return datetime(2025, 3, 10, hour, minute)


def test_interval_rejects_start_after_end():
    with pytest.raises(ValidationError):
        TimeInterval(_dt(12), _dt(11))


def test_interval_rejects_zero_length():
    with pytest.raises(ValidationError):
        TimeInterval(_dt(12), _dt(12))


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        TimeInterval(_dt(12), _dt(9))


def test_interval_rejects_mixed_naive_and_aware():
    with pytest.raises(ValidationError):
        TimeInterval(_dt(9), datetime(2025, 3, 10, 10, tzinfo=UTC))


def test_interval_is_immutable():
    interval = TimeInterval(_dt(9), _dt(10))
    with pytest.raises(AttributeError):
        interval.start = _dt(8)


def test_duration_helpers():
    interval = TimeInterval(_dt(9), _dt(10, 30))
    assert interval.duration == timedelta(minutes=90)
    assert interval.duration_minutes == 90


def test_overlap_and_intersection():
    a = TimeInterval(_dt(9), _dt(12))
    b = TimeInterval(_dt(11), _dt(14))
    c = TimeInterval(_dt(12), _dt(13))

    assert a.overlaps(b)
    assert a.intersection(b) == TimeInterval(_dt(11), _dt(12))
    # half-open: touching intervals do not overlap
    assert not a.overlaps(c)
    assert a.intersection(c) is None


def test_covers_and_clip():
    window = TimeInterval(_dt(8), _dt(22))
    assert window.covers(TimeInterval(_dt(9), _dt(10)))
    assert not window.covers(TimeInterval(_dt(7), _dt(10)))
    assert TimeInterval(_dt(7), _dt(10)).clip(window) == TimeInterval(_dt(8), _dt(10))
    assert TimeInterval(_dt(5), _dt(7)).clip(window) is None


def test_classified_block_serializes_label_as_event_title():
    block = ClassifiedBlock(TimeInterval(_dt(9), _dt(10)), BlockKind.BUSY, label="Standup")
    data = block.to_dict()
    assert data["type"] == "busy"
    assert data["eventTitle"] == "Standup"
    assert "eventTitle" not in ClassifiedBlock(block.interval, BlockKind.FREE).to_dict()


def test_free_window_to_dict_matches_endpoint_shape():
    window = FreeWindow(TimeInterval(_dt(10), _dt(12)), participant_count=3)
    assert window.to_dict() == {
        "start": _dt(10).isoformat(),
        "end": _dt(12).isoformat(),
        "duration": 120,
        "participantCount": 3,
    }


def test_free_window_requires_a_participant():
    with pytest.raises(ValidationError):
        FreeWindow(TimeInterval(_dt(10), _dt(12)), participant_count=0)
