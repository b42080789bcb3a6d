"""Tests for the plain-text rundown sheet."""

from vidpod.adapters.renderers import PlainTextRenderer


def _document(**timing):
    return {
        "rundown": {"title": "Morning news", "scheduled_date": "2025-03-01T09:00:00Z", "description": None},
        "segments": [
            {"title": "Intro", "type": "intro", "duration": 60, "pinned": True, "stories": []},
            {
                "title": "Recycling",
                "type": "segment",
                "duration": 125,
                "pinned": False,
                "stories": [{"title": "Campus recycling", "questions": ["Who collects it?"]}],
            },
            {"title": "Outro", "type": "outro", "duration": 30, "pinned": True, "stories": []},
        ],
        "unassigned_stories": [{"title": "School lunch", "questions": []}],
        "talent": {"host": [{"name": "Alex"}, {"name": "Sam"}], "guest": []},
        "timing": {"total_duration": 215, "target_duration": None, "difference": None, "over_target": False, **timing},
    }


def test_renders_sheet():
    renderer = PlainTextRenderer()

    text = renderer.render(_document()).decode("utf-8")
    lines = text.splitlines()

    assert lines[0] == "Morning news"
    assert lines[1] == "=" * len("Morning news")
    assert "Air date: 2025-03-01T09:00:00Z" in lines
    assert "Hosts: Alex, Sam" in lines
    assert not any(line.startswith("Guests:") for line in lines)
    assert " 1. Intro (intro, 1:00) [pinned]" in lines
    assert " 2. Recycling (segment, 2:05)" in lines
    assert "      - Story: Campus recycling" in lines
    assert "          ? Who collects it?" in lines
    assert "  - School lunch" in lines
    assert "Total: 3:35" in lines
    assert not any(line.startswith("Target:") for line in lines)
    assert renderer.media_type.startswith("text/plain")
    assert renderer.extension == "txt"


def test_reports_target_difference():
    text = PlainTextRenderer().render(
        _document(target_duration=180, difference=35, over_target=True)
    ).decode("utf-8")

    assert "Target: 3:00" in text
    assert "Difference: 0:35 (over target)" in text


def test_under_target_shows_negative_difference():
    text = PlainTextRenderer().render(
        _document(target_duration=300, difference=-85, over_target=False)
    ).decode("utf-8")

    assert "Difference: -1:25 (within target)" in text
