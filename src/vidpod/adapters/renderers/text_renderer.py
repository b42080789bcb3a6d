"""Plain-text rundown sheet renderer."""

from __future__ import annotations

from typing import Any

from ...domain.interfaces import DocumentRenderer


def _mmss(seconds: int | None) -> str:
    if seconds is None:
        return "--:--"
    sign = "-" if seconds < 0 else ""
    minutes, secs = divmod(abs(seconds), 60)
    return f"{sign}{minutes}:{secs:02d}"


class PlainTextRenderer(DocumentRenderer):
    """Renders an exported rundown document as a printable text sheet."""

    media_type = "text/plain; charset=utf-8"
    extension = "txt"

    def render(self, document: dict[str, Any]) -> bytes:
        rundown = document["rundown"]
        timing = document["timing"]
        lines: list[str] = [rundown["title"], "=" * len(rundown["title"])]

        if rundown.get("scheduled_date"):
            lines.append(f"Air date: {rundown['scheduled_date']}")
        if rundown.get("description"):
            lines.append(rundown["description"])
        lines.append("")

        talent = document.get("talent", {})
        for role in ("host", "guest"):
            names = [t["name"] for t in talent.get(role, [])]
            if names:
                lines.append(f"{role.title()}s: {', '.join(names)}")
        if any(talent.get(role) for role in ("host", "guest")):
            lines.append("")

        for position, segment in enumerate(document["segments"], start=1):
            marker = " [pinned]" if segment.get("pinned") else ""
            lines.append(
                f"{position:>2}. {segment['title']} ({segment['type']}, {_mmss(segment['duration'])}){marker}"
            )
            for link in segment.get("stories", []):
                lines.append(f"      - Story: {link['title']}")
                for question in link.get("questions", []):
                    lines.append(f"          ? {question}")

        unassigned = document.get("unassigned_stories", [])
        if unassigned:
            lines.append("")
            lines.append("Unassigned stories:")
            for link in unassigned:
                lines.append(f"  - {link['title']}")

        lines.append("")
        lines.append(f"Total: {_mmss(timing['total_duration'])}")
        if timing.get("target_duration") is not None:
            lines.append(f"Target: {_mmss(timing['target_duration'])}")
            state = "over" if timing["over_target"] else "within"
            lines.append(f"Difference: {_mmss(timing['difference'])} ({state} target)")

        return ("\n".join(lines) + "\n").encode("utf-8")


__all__ = ["PlainTextRenderer"]
