"""Update-type color map."""

from helm_outdated.models import UpdateType

UPDATE_COLORS: dict[UpdateType, str] = {
    UpdateType.MAJOR: "red bold",
    UpdateType.MINOR: "yellow",
    UpdateType.PATCH: "green",
    UpdateType.UP_TO_DATE: "dim",
    UpdateType.UNKNOWN: "dim",
}


def styled_update(update_type: UpdateType) -> str:
    color = UPDATE_COLORS.get(update_type, "white")
    return f"[{color}]{update_type.value}[/{color}]"
