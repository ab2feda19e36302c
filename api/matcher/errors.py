"""Error taxonomy for sign-up and matching rounds.

Only ``InternalError`` and ``TriggerAborted`` are expected in normal
operation; both leave the store untouched, so the trigger can be retried.
``EmptyPoolError`` and ``InfeasibleError`` signal a broken precondition.
"""


class MatcherError(Exception):
    pass


class EmptyPoolError(MatcherError):
    def __init__(self, size: int) -> None:
        super().__init__(f"Affinity graph needs at least 2 vertices, got {size}")
        self.size = size


class InfeasibleError(MatcherError):
    def __init__(self, size: int) -> None:
        super().__init__(f"No near-perfect matching exists for {size} vertices")
        self.size = size


class InsufficientParticipants(MatcherError):
    def __init__(self, waiting_count: int) -> None:
        super().__init__(f"Need at least 2 waiting participants, found {waiting_count}")
        self.waiting_count = waiting_count


class DuplicateError(MatcherError):
    def __init__(self, person_id: int) -> None:
        super().__init__(f"Person {person_id} is already waiting")
        self.person_id = person_id


class UnknownPersonError(MatcherError):
    def __init__(self, person_id: int) -> None:
        super().__init__(f"Person {person_id} does not exist")
        self.person_id = person_id


class TriggerAborted(MatcherError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Matching round aborted: {reason}")
        self.reason = reason


class InternalError(MatcherError):
    pass


class StaleSnapshotError(TriggerAborted):
    """The waiting set changed under a round before it could commit; nothing was written."""

    def __init__(self, person_ids: list[int]) -> None:
        super().__init__(f"waiting entries for {person_ids} changed since the snapshot")
        self.person_ids = person_ids
