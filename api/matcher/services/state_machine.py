IDLE = "idle"
READING_WAITING = "reading_waiting"
MATCHING = "matching"
COMMITTING = "committing"
DONE = "done"
ABORTED = "aborted"

TERMINAL_STATES = {DONE, ABORTED}


def transition_round(current: str, action: str) -> str:
    if current in TERMINAL_STATES:
        return current

    if action == "fail":
        return ABORTED

    if action == "cancel":
        # Committing runs to completion or rolls back as a unit.
        if current == COMMITTING:
            return current
        return ABORTED

    if action == "start":
        if current == IDLE:
            return READING_WAITING
        return current

    if action == "snapshot":
        if current == READING_WAITING:
            return MATCHING
        return current

    if action == "matched":
        if current == MATCHING:
            return COMMITTING
        return current

    if action == "commit":
        if current == COMMITTING:
            return DONE
        return current

    return current


def can_cancel(current: str) -> bool:
    return current not in TERMINAL_STATES and current != COMMITTING
