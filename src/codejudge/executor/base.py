from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional


@dataclass
class ExecSpec:
    cmd: List[str]
    workdir: Path
    timeout_s: float
    env: Dict[str, str] = field(default_factory=dict)
    preexec: Optional[Callable[[], None]] = None


@dataclass
class ProcResult:
    rc: Optional[int]
    stdout: bytes
    stderr: bytes
    timed_out: bool
    duration_s: float
