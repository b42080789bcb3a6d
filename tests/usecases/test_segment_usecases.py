"""
Tests for the segment use cases.

Covers insert-after placement, the pinned intro/outro boundaries, reorder
validation, duplication and delete-with-renumbering.
"""

import uuid

import pytest

from vidpod.domain.entities import RundownSegment
from vidpod.infra.exceptions import (
    AccessDeniedError,
    ConflictError,
    InvalidArgumentError,
    InvalidReorderSetError,
    NotFoundError,
)
from vidpod.usecases.rundown_add import add_rundown
from vidpod.usecases.segment_add import add_segment
from vidpod.usecases.segment_delete import delete_segment
from vidpod.usecases.segment_duplicate import duplicate_segment
from vidpod.usecases.segment_list import list_segments
from vidpod.usecases.segment_reorder import reorder_segments
from vidpod.usecases.segment_update import update_segment
from vidpod.usecases.story_attach import attach_story
from vidpod.usecases.story_list import list_story_links


@pytest.fixture
def rundown(db, access, teacher):
    return add_rundown(db, actor=teacher, access=access, title="Friday show", class_id="class-a")


def _titles(db, access, actor, rundown_id):
    return [(s["rank"], s["title"]) for s in list_segments(db, actor=actor, access=access, rundown_id=rundown_id)]


def _assert_contiguous(db, rundown_id):
    ranks = sorted(
        r for (r,) in db.query(RundownSegment.rank).filter(RundownSegment.rundown_id == uuid.UUID(rundown_id))
    )
    assert ranks == list(range(len(ranks)))


def test_new_rundown_has_pinned_intro_and_outro(db, access, teacher, rundown):
    segments = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])

    assert [(s["rank"], s["title"], s["pinned"]) for s in segments] == [
        (0, "Intro", True),
        (1, "Outro", True),
    ]
    assert segments[0]["boundary"] == "leading"
    assert segments[1]["boundary"] == "trailing"
    assert segments[0]["duration"] == 60
    assert segments[1]["duration"] == 30


def test_insert_without_anchor_goes_before_outro(db, access, teacher, rundown):
    new = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="Interview")

    assert new["rank"] == 1
    assert new["duration"] == 60
    assert new["type"] == "segment"
    assert new["status"] == "Draft"
    assert new["pinned"] is False
    assert _titles(db, access, teacher, rundown["id"]) == [(0, "Intro"), (1, "Interview"), (2, "Outro")]


def test_insert_after_anchor_shifts_later_siblings(db, access, teacher, rundown):
    first = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="A")
    add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="B")
    add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="C")

    new = add_segment(
        db, actor=teacher, access=access, rundown_id=rundown["id"], title="X", insert_after=first["id"]
    )

    assert new["rank"] == 2
    assert _titles(db, access, teacher, rundown["id"]) == [
        (0, "Intro"),
        (1, "A"),
        (2, "X"),
        (3, "B"),
        (4, "C"),
        (5, "Outro"),
    ]


def test_insert_after_anchor_in_other_rundown_is_not_found(db, access, teacher, rundown):
    other = add_rundown(db, actor=teacher, access=access, title="Other")
    foreign = add_segment(db, actor=teacher, access=access, rundown_id=other["id"], title="Elsewhere")

    with pytest.raises(NotFoundError):
        add_segment(
            db, actor=teacher, access=access, rundown_id=rundown["id"], title="X", insert_after=foreign["id"]
        )
    db.rollback()
    assert _titles(db, access, teacher, rundown["id"]) == [(0, "Intro"), (1, "Outro")]


def test_insert_after_outro_is_rejected(db, access, teacher, rundown):
    outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])[-1]

    with pytest.raises(InvalidArgumentError, match="closing segment"):
        add_segment(
            db, actor=teacher, access=access, rundown_id=rundown["id"], title="X", insert_after=outro["id"]
        )


def test_insert_requires_title(db, access, teacher, rundown):
    with pytest.raises(InvalidArgumentError, match="Title is required"):
        add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="   ")


def test_student_cannot_insert_into_shared_rundown(db, access, teacher, student):
    shared = add_rundown(
        db, actor=teacher, access=access, title="Shared", class_id="class-a", share_with_class=True
    )

    with pytest.raises(AccessDeniedError):
        add_segment(db, actor=student, access=access, rundown_id=shared["id"], title="Mine")
    db.rollback()
    assert len(list_segments(db, actor=student, access=access, rundown_id=shared["id"])) == 2


def test_update_patches_fields_but_never_rank(db, access, teacher, rundown):
    seg = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="Interview")

    updated = update_segment(
        db,
        actor=teacher,
        access=access,
        segment_id=seg["id"],
        duration=120,
        status="Ready",
        content={"questions": ["Why?"]},
    )

    assert updated["title"] == "Interview"
    assert updated["duration"] == 120
    assert updated["status"] == "Ready"
    assert updated["content"] == {"questions": ["Why?"]}
    assert updated["rank"] == 1


def test_update_with_wrong_rundown_is_not_found(db, access, teacher, rundown):
    other = add_rundown(db, actor=teacher, access=access, title="Other")
    seg = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="Interview")

    with pytest.raises(NotFoundError):
        update_segment(
            db, actor=teacher, access=access, segment_id=seg["id"], rundown_id=other["id"], title="Moved"
        )


def test_reorder_applies_full_permutation(db, access, teacher, rundown):
    a = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="A")
    b = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="B")
    intro, _, _, outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])

    result = reorder_segments(
        db,
        actor=teacher,
        access=access,
        rundown_id=rundown["id"],
        ordered_ids=[intro["id"], b["id"], a["id"], outro["id"]],
    )

    assert [s["title"] for s in result] == ["Intro", "B", "A", "Outro"]
    assert _titles(db, access, teacher, rundown["id"]) == [(0, "Intro"), (1, "B"), (2, "A"), (3, "Outro")]


def test_reorder_with_missing_id_changes_nothing(db, access, teacher, rundown):
    a = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="A")
    add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="B")
    intro, _, _, outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])

    with pytest.raises(InvalidReorderSetError):
        reorder_segments(
            db,
            actor=teacher,
            access=access,
            rundown_id=rundown["id"],
            ordered_ids=[intro["id"], a["id"], outro["id"]],
        )
    db.rollback()

    assert _titles(db, access, teacher, rundown["id"]) == [(0, "Intro"), (1, "A"), (2, "B"), (3, "Outro")]


def test_reorder_cannot_move_pinned_segments_off_their_boundary(db, access, teacher, rundown):
    a = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="A")
    intro, _, outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])

    with pytest.raises(InvalidReorderSetError, match="closing segment"):
        reorder_segments(
            db,
            actor=teacher,
            access=access,
            rundown_id=rundown["id"],
            ordered_ids=[intro["id"], outro["id"], a["id"]],
        )
    with pytest.raises(InvalidReorderSetError, match="opening segment"):
        reorder_segments(
            db,
            actor=teacher,
            access=access,
            rundown_id=rundown["id"],
            ordered_ids=[a["id"], intro["id"], outro["id"]],
        )


def test_reorder_guards_boundaries_for_any_id_spelling(db, access, teacher, rundown):
    a = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="A")
    intro, _, outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])

    with pytest.raises(InvalidReorderSetError, match="opening segment"):
        reorder_segments(
            db,
            actor=teacher,
            access=access,
            rundown_id=rundown["id"],
            ordered_ids=[uuid.UUID(sid).hex for sid in (outro["id"], a["id"], intro["id"])],
        )
    db.rollback()

    assert _titles(db, access, teacher, rundown["id"]) == [(0, "Intro"), (1, "A"), (2, "Outro")]

    result = reorder_segments(
        db,
        actor=teacher,
        access=access,
        rundown_id=rundown["id"],
        ordered_ids=[
            "{" + intro["id"].upper() + "}",
            uuid.UUID(a["id"]).urn,
            uuid.UUID(outro["id"]).hex,
        ],
    )
    assert [s["boundary"] for s in result] == ["leading", None, "trailing"]


def test_duplicate_inserts_copy_after_source(db, access, teacher, rundown):
    a = add_segment(
        db, actor=teacher, access=access, rundown_id=rundown["id"], title="A", content={"notes": "n"}
    )
    update_segment(db, actor=teacher, access=access, segment_id=a["id"], status="Ready", expanded=True)
    add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="B")

    copy = duplicate_segment(db, actor=teacher, access=access, segment_id=a["id"])

    assert copy["title"] == "A (Copy)"
    assert copy["rank"] == 2
    assert copy["status"] == "Draft"
    assert copy["expanded"] is False
    assert copy["pinned"] is False
    assert copy["content"] == {"notes": "n"}
    assert _titles(db, access, teacher, rundown["id"]) == [
        (0, "Intro"),
        (1, "A"),
        (2, "A (Copy)"),
        (3, "B"),
        (4, "Outro"),
    ]


def test_duplicate_of_outro_stays_before_outro(db, access, teacher, rundown):
    outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])[-1]

    copy = duplicate_segment(db, actor=teacher, access=access, segment_id=outro["id"])

    assert copy["pinned"] is False
    assert _titles(db, access, teacher, rundown["id"]) == [(0, "Intro"), (1, "Outro (Copy)"), (2, "Outro")]


def test_delete_renumbers_remaining_segments(db, access, teacher, rundown):
    a = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="A")
    add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="B")

    result = delete_segment(db, actor=teacher, access=access, segment_id=a["id"])

    assert result["deleted"] == 1
    assert _titles(db, access, teacher, rundown["id"]) == [(0, "Intro"), (1, "B"), (2, "Outro")]


def test_delete_middle_of_three(db, access, teacher):
    # Intro, Middle, Outro at ranks 0, 1, 2
    rundown = add_rundown(db, actor=teacher, access=access, title="Three")
    intro, outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])
    middle = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="Middle")

    delete_segment(db, actor=teacher, access=access, segment_id=middle["id"])

    segments = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])
    assert [(s["id"], s["rank"]) for s in segments] == [(intro["id"], 0), (outro["id"], 1)]


def test_delete_pinned_segment_is_conflict(db, access, teacher, rundown):
    intro, outro = list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])

    for pinned in (intro, outro):
        with pytest.raises(ConflictError, match="pinned"):
            delete_segment(db, actor=teacher, access=access, segment_id=pinned["id"])
        db.rollback()

    assert len(list_segments(db, actor=teacher, access=access, rundown_id=rundown["id"])) == 2


def test_delete_unassigns_story_links(db, access, teacher, directory, rundown):
    seg = add_segment(db, actor=teacher, access=access, rundown_id=rundown["id"], title="Story block")
    attach_story(
        db,
        actor=teacher,
        access=access,
        stories=directory,
        rundown_id=rundown["id"],
        source_story_id=1,
        segment_id=seg["id"],
    )

    result = delete_segment(db, actor=teacher, access=access, segment_id=seg["id"])

    links = list_story_links(db, actor=teacher, access=access, rundown_id=rundown["id"])
    assert result["unlinked_stories"] == 1
    assert len(links) == 1
    assert links[0]["segment_id"] is None


def test_ranks_stay_contiguous_over_mixed_mutations(db, access, teacher, rundown):
    rid = rundown["id"]
    a = add_segment(db, actor=teacher, access=access, rundown_id=rid, title="A")
    _assert_contiguous(db, a["rundown_id"])
    b = add_segment(db, actor=teacher, access=access, rundown_id=rid, title="B", insert_after=a["id"])
    duplicate_segment(db, actor=teacher, access=access, segment_id=b["id"])
    delete_segment(db, actor=teacher, access=access, segment_id=a["id"])
    add_segment(db, actor=teacher, access=access, rundown_id=rid, title="C")

    segments = list_segments(db, actor=teacher, access=access, rundown_id=rid)
    assert [s["rank"] for s in segments] == list(range(len(segments)))
    assert segments[0]["title"] == "Intro"
    assert segments[-1]["title"] == "Outro"
