from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional


class FileKind(str, Enum):
    SOURCE = "SOURCE"
    INPUT = "INPUT"


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    COMPILE_FAILURE = "COMPILE_FAILURE"
    RUNTIME_FAILURE = "RUNTIME_FAILURE"
    TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"


class VerdictKind(str, Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    WRONG_ANSWER = "Wrong Answer"
    RUNTIME_FAILURE = "Runtime Error"
    COMPILE_FAILURE = "Compile Error"
    TIME_LIMIT_EXCEEDED = "Time Limit Exceeded"


@dataclass
class Limits:
    cpu_seconds: int = 2
    memory_bytes: int = 256 * 1024 * 1024
    nofile: int = 64
    wall_timeout_seconds: float = 5
    compile_timeout_seconds: float = 30
    max_output_bytes: int = 10 * 1024 * 1024

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Limits":
        d = cls()
        return cls(
            cpu_seconds=int(raw.get("cpu_seconds", d.cpu_seconds)),
            memory_bytes=int(raw.get("memory_bytes", d.memory_bytes)),
            nofile=int(raw.get("nofile", d.nofile)),
            wall_timeout_seconds=float(raw.get("wall_timeout_seconds", d.wall_timeout_seconds)),
            compile_timeout_seconds=float(raw.get("compile_timeout_seconds", d.compile_timeout_seconds)),
            max_output_bytes=int(raw.get("max_output_bytes", d.max_output_bytes)),
        )


@dataclass
class Job:
    job_id: str
    language: str       # "cpp" | "c" | "python"
    source_path: Path   # codes/<id>.<ext>
    binary_path: Path   # outputs/<id>.out (python: không dùng)


@dataclass(frozen=True)
class TestCase:
    __test__ = False  # tránh pytest collect nhầm

    input: str
    expected_output: str
    is_sample: bool = False


@dataclass
class ExecOutcome:
    outcome: Outcome
    stdout: str = ""
    message: str = ""
    rc: Optional[int] = None
    duration_s: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


@dataclass
class Verdict:
    kind: VerdictKind = VerdictKind.PENDING
    failing_case: Optional[int] = None   # 1-based
    message: Optional[str] = None
    passed_cases: int = 0
    total_cases: int = 0

    @property
    def accepted(self) -> bool:
        return self.kind is VerdictKind.ACCEPTED

    @classmethod
    def accept(cls, total: int) -> "Verdict":
        return cls(VerdictKind.ACCEPTED, passed_cases=total, total_cases=total)

    @classmethod
    def wrong_answer(cls, index: int, total: int) -> "Verdict":
        return cls(VerdictKind.WRONG_ANSWER, failing_case=index, passed_cases=index - 1, total_cases=total)

    @classmethod
    def from_outcome(cls, res: ExecOutcome, index: Optional[int], total: int) -> "Verdict":
        kind = {
            Outcome.COMPILE_FAILURE: VerdictKind.COMPILE_FAILURE,
            Outcome.TIME_LIMIT_EXCEEDED: VerdictKind.TIME_LIMIT_EXCEEDED,
        }.get(res.outcome, VerdictKind.RUNTIME_FAILURE)
        passed = index - 1 if index else 0
        return cls(kind, failing_case=index, message=res.message, passed_cases=passed, total_cases=total)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "verdict": self.kind.value,
            "failing_case": self.failing_case,
            "message": self.message,
            "passed_cases": self.passed_cases,
            "total_cases": self.total_cases,
        }
