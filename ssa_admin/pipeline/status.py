from datetime import datetime

from ssa_admin import config

# current status -> statuses it may move to
TRANSITIONS = {
    "draft": {"published", "archived"},
    "published": {"archived", "draft"},
    "archived": {"draft"},
}


class StatusTransitionError(ValueError):
    """Raised when a record is asked to move to a status it cannot reach."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move record from '{current}' to '{target}'")


def can_transition(current, target):
    if target not in config.STATUSES:
        return False
    if current == target:
        return True
    return target in TRANSITIONS.get(current or config.DEFAULT_STATUS, set())


def transition(record, target):
    """
    Validate a status change and return the update payload for it.
    Moving to the current status is allowed and returns an empty payload.
    """
    current = record.get("status") or config.DEFAULT_STATUS
    if not can_transition(current, target):
        raise StatusTransitionError(current, target)

    if current == target:
        return {}
    return {"status": target, "updated_at": datetime.utcnow().isoformat() + "Z"}
