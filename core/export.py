"""Plain-text share format for daily lists and weekly goals.

Output is chat-friendly markdown (``*bold*`` header, ``_italic_`` section
labels), e.g.::

    *Monday, February 16 - Update*

    _Work_
    🟢 Ship release
    🟡 Review PRs (waiting on CI)
"""

from __future__ import annotations

from core.models import SECTIONS, Item, PeriodRecord
from core.periods import format_day_display, format_week_display

STATUS_EMOJI = {"green": "🟢", "yellow": "🟡", "red": "🔴"}


def status_emoji(status: str | None) -> str:
    return STATUS_EMOJI.get(status or "", "")


def period_title(record: PeriodRecord) -> str:
    if record.week is not None:
        return format_week_display(record.week)
    return format_day_display(record.period_key)


def _group_by_section(items: list[Item]) -> list[tuple[str | None, list[Item]]]:
    """Known sections in fixed order, then unsectioned items; empty groups dropped."""
    groups: list[tuple[str | None, list[Item]]] = []
    for section in SECTIONS:
        members = [i for i in items if i.section == section]
        if members:
            groups.append((section, members))
    rest = [i for i in items if i.section not in SECTIONS]
    if rest:
        groups.append((None, rest))
    return groups


def format_item_line(item: Item, number: int, completed: bool) -> str:
    emoji = status_emoji(item.status)
    prefix = emoji if completed and emoji else f"{number}."
    explanation = f" ({item.explanation})" if item.status == "yellow" and item.explanation else ""
    return f"{prefix} {item.text}{explanation}"


def format_share_text(record: PeriodRecord, title: str | None = None) -> str:
    """Render *record* for pasting into a chat."""
    suffix = "Update" if record.is_completed else "Goals"
    lines = [f"*{title or period_title(record)} - {suffix}*", ""]

    groups = _group_by_section(record.items)
    labelled = any(section for section, _ in groups)
    number = 0
    for section, members in groups:
        if labelled:
            if number:
                lines.append("")
            lines.append(f"_{(section or 'Other').capitalize()}_")
        for item in members:
            number += 1
            lines.append(format_item_line(item, number, record.is_completed))

    return "\n".join(lines).strip()


def outcome_counts(record: PeriodRecord) -> dict[str, int]:
    counts = {"green": 0, "yellow": 0, "red": 0, "unset": 0}
    for item in record.items:
        counts[item.status if item.status in STATUS_EMOJI else "unset"] += 1
    return counts
