"""
Human-readable notification messages.

Messages are bounded so they always fit in a single chat message.
"""

from skyledger.models.inventory import ItemChange

DEFAULT_MAX_MESSAGE_LENGTH = 4000
ELLIPSIS = "…"

UPDATE_HEADER = "📊 Inventory update for {player}:"
FAILURE_HEADER = "🚨 Error during {stage}: "


def truncate(text: str, max_length: int) -> str:
    """Clamp text to max_length characters, marking the cut with an ellipsis."""
    if max_length <= 0:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - len(ELLIPSIS)] + ELLIPSIS


def format_change_line(change: ItemChange) -> str:
    return f"{change.name}: {change.previous} → {change.current}"


def format_changes(
    player_label: str,
    changes: list[ItemChange],
    max_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
) -> str:
    """
    Render a change set as a notification.

    The header names the player and each change gets its own line. An
    empty change set yields the header alone.
    """
    lines = [UPDATE_HEADER.format(player=player_label)]
    lines.extend(format_change_line(change) for change in changes)
    return truncate("\n".join(lines), max_length)


def format_failure(
    stage: str,
    detail: str,
    max_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
) -> str:
    """
    Render a run failure as a notification.

    The error detail is truncated first so the header survives, then the
    whole message is clamped.
    """
    header = FAILURE_HEADER.format(stage=stage)
    detail = truncate(detail, max_length - len(header))
    return truncate(header + detail, max_length)
