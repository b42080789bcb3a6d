"""Tests for story linkage: attach, browse, update, remove and export."""

import uuid
from unittest.mock import MagicMock, patch

import pytest

import vidpod.usecases.story_attach as story_attach_module
from vidpod.domain.entities import RundownStory
from vidpod.infra.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from vidpod.usecases.rundown_add import _load_rundown, add_rundown
from vidpod.usecases.rundown_export import export_rundown
from vidpod.usecases.segment_add import add_segment
from vidpod.usecases.segment_update import update_segment
from vidpod.usecases.story_attach import attach_story
from vidpod.usecases.story_browse import browse_stories
from vidpod.usecases.story_list import list_story_links
from vidpod.usecases.story_remove import remove_story_link
from vidpod.usecases.story_update import update_story_link
from vidpod.usecases.talent_add import add_talent


@pytest.fixture
def rundown(db, access, teacher):
    return add_rundown(
        db, actor=teacher, access=access, title="News hour", class_id="class-a", target_duration=300
    )


def test_attach_copies_a_snapshot(db, access, teacher, directory, rundown):
    link = attach_story(
        db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1
    )

    assert link["source_story_id"] == 1
    assert link["title"] == "Campus recycling"
    assert link["questions"] == ["Who collects it?", "How much is recycled?"]
    assert link["tags"] == ["environment"]
    assert link["segment_id"] is None
    assert link["attached_by"] == "t-1"


def test_attach_same_story_twice_is_conflict(db, access, teacher, directory, rundown):
    attach_story(db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1)

    with pytest.raises(ConflictError):
        attach_story(
            db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1
        )
    db.rollback()

    assert len(list_story_links(db, actor=teacher, access=access, rundown_id=rundown["id"])) == 1


def test_attach_locks_the_rundown(db, access, teacher, directory, rundown):
    with patch.object(story_attach_module, "_load_rundown", wraps=_load_rundown) as load:
        attach_story(
            db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1
        )

    assert load.call_args.kwargs["lock"] is True
    assert load.call_args.kwargs["edit"] is True


def test_attach_losing_a_race_is_conflict(db, session_factory, access, teacher, directory, rundown):
    def attach_concurrently(story_id):
        other = session_factory()
        try:
            other.add(
                RundownStory(
                    rundown_id=uuid.UUID(rundown["id"]),
                    source_story_id=story_id,
                    title="Campus recycling",
                    attached_by="t-1",
                )
            )
            other.commit()
        finally:
            other.close()
        return directory.get_story(story_id)

    stories = MagicMock(wraps=directory)
    stories.get_story.side_effect = attach_concurrently

    with pytest.raises(ConflictError):
        attach_story(
            db, actor=teacher, access=access, stories=stories, rundown_id=rundown["id"], source_story_id=1
        )

    assert len(list_story_links(db, actor=teacher, access=access, rundown_id=rundown["id"])) == 1


def test_attach_to_segment_of_other_rundown_is_invalid(db, access, teacher, directory, rundown):
    other = add_rundown(db, actor=teacher, access=access, title="Other")
    foreign = add_segment(db, actor=teacher, access=access, rundown_id=other["id"], title="Elsewhere")

    with pytest.raises(InvalidArgumentError, match="does not belong"):
        attach_story(
            db,
            actor=teacher,
            access=access,
            stories=directory,
            rundown_id=rundown["id"],
            source_story_id=1,
            segment_id=foreign["id"],
        )


def test_attach_missing_or_invisible_story_is_not_found(db, access, teacher, directory, rundown):
    with pytest.raises(NotFoundError):
        attach_story(
            db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=99
        )
    # Unapproved story owned by someone else
    with pytest.raises(NotFoundError):
        attach_story(
            db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=3
        )


def test_owner_can_attach_own_unapproved_story(db, access, student, directory):
    own = add_rundown(db, actor=student, access=access, title="My show")

    link = attach_story(db, actor=student, access=access, stories=directory, rundown_id=own["id"], source_story_id=3)

    assert link["title"] == "Draft idea"


def test_snapshot_survives_source_changes(db, access, teacher, directory, rundown):
    attach_story(db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=2)

    directory._apply({"stories": []})

    links = list_story_links(db, actor=teacher, access=access, rundown_id=rundown["id"])
    assert links[0]["title"] == "School lunch"


def test_update_moves_link_between_segments_and_clears(db, access, teacher, directory, rundown):
    seg = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="Feature")
    link = attach_story(
        db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1
    )

    moved = update_story_link(
        db, actor=teacher, access=access, link_id=link["id"], segment_id=seg["id"], notes="Lead story"
    )
    assert moved["segment_id"] == seg["id"]
    assert moved["notes"] == "Lead story"

    cleared = update_story_link(db, actor=teacher, access=access, link_id=link["id"], clear_segment=True)
    assert cleared["segment_id"] is None
    assert cleared["notes"] == "Lead story"


def test_update_rejects_foreign_segment(db, access, teacher, directory, rundown):
    other = add_rundown(db, actor=teacher, access=access, title="Other")
    foreign = add_segment(db, actor=teacher, access=access, rundown_id=other["id"], title="Elsewhere")
    link = attach_story(
        db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1
    )

    with pytest.raises(InvalidArgumentError):
        update_story_link(db, actor=teacher, access=access, link_id=link["id"], segment_id=foreign["id"])


def test_remove_detaches_story(db, access, teacher, directory, rundown):
    link = attach_story(
        db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1
    )

    remove_story_link(db, actor=teacher, access=access, link_id=link["id"])

    assert list_story_links(db, actor=teacher, access=access, rundown_id=rundown["id"]) == []
    # Re-attaching after removal is allowed
    attach_story(db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=1)


def test_browse_filters_visibility_and_flags_attached(db, access, student, directory):
    own = add_rundown(db, actor=student, access=access, title="My show")
    attach_story(db, actor=student, access=access, stories=directory, rundown_id=own["id"], source_story_id=1)

    result = browse_stories(db, actor=student, access=access, stories=directory, rundown_id=own["id"])

    ids = [s["story_id"] for s in result["stories"]]
    assert ids == [3, 2, 1]  # newest first, story 4 is someone else's draft
    assert result["total"] == 3
    flags = {s["story_id"]: s["already_attached"] for s in result["stories"]}
    assert flags == {3: False, 2: False, 1: True}


def test_browse_search_tag_and_paging(db, access, teacher, directory):
    by_tag = browse_stories(db, actor=teacher, access=access, stories=directory, tag="environment")
    assert [s["story_id"] for s in by_tag["stories"]] == [1]

    by_search = browse_stories(db, actor=teacher, access=access, stories=directory, search="LUNCH")
    assert [s["story_id"] for s in by_search["stories"]] == [2]

    page = browse_stories(db, actor=teacher, access=access, stories=directory, limit=1, offset=1)
    assert page["total"] == 2
    assert [s["story_id"] for s in page["stories"]] == [1]
    assert "already_attached" not in page["stories"][0]


def test_browse_rejects_bad_limit(db, access, teacher, directory):
    with pytest.raises(InvalidArgumentError):
        browse_stories(db, actor=teacher, access=access, stories=directory, limit=0)


def test_export_groups_stories_by_segment_and_computes_timing(db, access, teacher, directory, rundown):
    seg = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="Feature", duration=240)
    attach_story(
        db,
        actor=teacher,
        access=access,
        stories=directory,
        rundown_id=rundown["id"],
        source_story_id=1,
        segment_id=seg["id"],
    )
    attach_story(db, actor=teacher, access=access, stories=directory, rundown_id=rundown["id"], source_story_id=2)
    add_talent(db, actor=teacher, access=access, rundown_id=rundown["id"], name="Ana", role="host")

    document = export_rundown(db, actor=teacher, access=access, rundown_id=rundown["id"])

    assert [s["title"] for s in document["segments"]] == ["Intro", "Feature", "Outro"]
    assert [link["source_story_id"] for link in document["segments"][1]["stories"]] == [1]
    assert [link["source_story_id"] for link in document["unassigned_stories"]] == [2]
    assert [t["name"] for t in document["talent"]["host"]] == ["Ana"]
    assert document["timing"] == {
        "total_duration": 330,
        "target_duration": 300,
        "difference": 30,
        "over_target": True,
    }


def test_export_without_target(db, access, teacher):
    rundown = add_rundown(db, actor=teacher, access=access, title="Untimed")
    intro = export_rundown(db, actor=teacher, access=access, rundown_id=rundown["id"])["segments"][0]
    update_segment(db, actor=teacher, access=access, segment_id=intro["id"], duration=10)

    timing = export_rundown(db, actor=teacher, access=access, rundown_id=rundown["id"])["timing"]

    assert timing == {"total_duration": 40, "target_duration": None, "difference": None, "over_target": False}
