from __future__ import annotations

import structlog

from ..core.utils import normalize_identity
from .problem_store import ProblemStore

log = structlog.get_logger(__name__)


class AcceptanceRecorder:
    """Ghi nhận user đã AC một problem. Gọi nhiều lần vẫn chỉ có một bản ghi."""

    def __init__(self, store: ProblemStore):
        self.store = store

    def record(self, problem_id: str, identity: str) -> bool:
        ident = normalize_identity(identity)
        if not ident:
            raise ValueError("identity is empty")
        added = self.store.append_accepted_identity(problem_id, ident)
        log.info("acceptance_recorded" if added else "acceptance_exists", problem_id=problem_id, identity=ident)
        return added

    def has_accepted(self, problem_id: str, identity: str) -> bool:
        return normalize_identity(identity) in self.store.get_accepted_identities(problem_id)
