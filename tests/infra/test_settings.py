"""Tests for environment-driven settings."""

from vidpod.infra.settings import Settings


def test_reads_aliases_from_environment(monkeypatch):
    monkeypatch.setenv("TALENT_LIMIT", "6")
    monkeypatch.setenv("DIRECTORY_FILE", "/etc/vidpod/directory.yaml")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example,")

    configured = Settings()

    assert configured.talent_limit == 6
    assert configured.directory_file == "/etc/vidpod/directory.yaml"
    assert configured.origins == ["https://a.example", "https://b.example"]


def test_defaults(monkeypatch):
    for name in ("TALENT_LIMIT", "DIRECTORY_FILE", "ALLOWED_ORIGINS"):
        monkeypatch.delenv(name, raising=False)

    configured = Settings(_env_file=None)

    assert configured.talent_limit == 4
    assert configured.directory_file == ""
    assert configured.origins == ["*"]
