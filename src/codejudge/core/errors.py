from __future__ import annotations
from typing import Optional

from .models import ExecOutcome, Outcome


class JudgeError(Exception):
    """Lỗi gốc của pipeline chấm."""


class JobFileError(JudgeError, OSError):
    """Không tạo/ghi được file job (disk, permission...). Không retry."""


class ExecutionError(JudgeError):
    """Compile/run thất bại. `outcome` cho biết nguyên nhân cụ thể."""

    def __init__(self, message: str, outcome: Optional[ExecOutcome] = None):
        super().__init__(message)
        self.message = message
        self.outcome = outcome or ExecOutcome(Outcome.RUNTIME_FAILURE, message=message)

    @property
    def kind(self) -> Outcome:
        return self.outcome.outcome


class NotFoundError(JudgeError, LookupError):
    pass


class UnsupportedLanguageError(JudgeError, ValueError):
    pass


class EmptySubmissionError(JudgeError, ValueError):
    pass
