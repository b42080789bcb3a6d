"""Tests for the YAML-backed identity, roster and story directory."""

import pytest

from vidpod.adapters.yaml_directory import YamlDirectory
from vidpod.infra.exceptions import NotFoundError, UnauthenticatedError
from vidpod.shared.types import Actor, Role

DIRECTORY_YAML = """
users:
  - id: t-100
    role: teacher
    token: teacher-token
  - id: s-200
    role: Student
    token: student-token
classes:
  - id: class-7
    teacher_id: t-100
    students: [s-200]
stories:
  - id: 1
    title: Campus recycling
    description: Where does the waste go?
    questions: ["Who collects it?"]
    tags: [environment]
    approved: true
    owner_id: s-200
    created_at: 2024-09-01
  - id: 2
    title: Bus routes
    tags: transport
    approved: true
    owner_id: t-100
    created_at: 2024-09-01
  - id: 3
    title: Recycling follow-up
    approved: false
    owner_id: s-200
    created_at: 2024-10-01
"""


@pytest.fixture
def directory_file(tmp_path):
    path = tmp_path / "directory.yaml"
    path.write_text(DIRECTORY_YAML, encoding="utf-8")
    return path


def test_loads_lazily_from_file(directory_file):
    directory = YamlDirectory(directory_file)

    assert directory.authenticate("teacher-token") == Actor(actor_id="t-100", role=Role.TEACHER)
    assert directory.authenticate("student-token").role is Role.STUDENT


def test_missing_file_raises(tmp_path):
    directory = YamlDirectory(tmp_path / "absent.yaml")

    with pytest.raises(FileNotFoundError):
        directory.authenticate("teacher-token")


def test_unknown_or_empty_token(directory_file):
    directory = YamlDirectory(directory_file)

    with pytest.raises(UnauthenticatedError):
        directory.authenticate("wrong")
    with pytest.raises(UnauthenticatedError):
        directory.authenticate("")


def test_roster_lookups(directory_file):
    directory = YamlDirectory(directory_file)

    assert directory.is_teacher_of_class("t-100", "class-7")
    assert not directory.is_teacher_of_class("s-200", "class-7")
    assert directory.is_student_enrolled("s-200", "class-7")
    assert not directory.is_student_enrolled("s-200", "class-8")
    assert directory.taught_class_ids("t-100") == {"class-7"}
    assert directory.enrolled_class_ids("s-200") == {"class-7"}


def test_story_lookup(directory_file):
    directory = YamlDirectory(directory_file)

    story = directory.get_story(1)
    assert story.title == "Campus recycling"
    assert story.questions == ["Who collects it?"]
    assert directory.get_story(2).tags == ["transport"]
    with pytest.raises(NotFoundError):
        directory.get_story(99)


def test_search_newest_first_then_id(directory_file):
    directory = YamlDirectory(directory_file)

    assert [s.story_id for s in directory.search_stories()] == [3, 2, 1]
    assert [s.story_id for s in directory.search_stories(search="recycl")] == [3, 1]
    assert [s.story_id for s in directory.search_stories(tag="environment")] == [1]


def test_reload_picks_up_changes(directory_file):
    directory = YamlDirectory(directory_file)
    directory.authenticate("teacher-token")

    directory_file.write_text("users:\n  - id: a-1\n    role: admin\n    token: new-token\n", encoding="utf-8")
    directory.reload()

    assert directory.authenticate("new-token").role is Role.ADMIN
    with pytest.raises(UnauthenticatedError):
        directory.authenticate("teacher-token")


def test_rejects_unknown_role():
    with pytest.raises(ValueError, match="Unknown role"):
        YamlDirectory.from_data({"users": [{"id": "x", "role": "janitor", "token": "t"}]})
