from __future__ import annotations
import resource
from typing import Optional


def _set(res: int, soft: int, hard: int) -> None:
    try:
        resource.setrlimit(res, (soft, hard))
    except (ValueError, OSError):
        pass


def apply_rlimits(cpu_seconds: int, memory_bytes: int, nofile: int, fsize_bytes: Optional[int] = None) -> None:
    """
    Áp giới hạn ở cấp tiến trình: CPU time, bộ nhớ ảo, số file descriptor, kích thước file ghi ra.
    Nếu hệ điều hành không hỗ trợ một limit nhất định thì giữ mặc định.
    """
    if cpu_seconds:
        # soft < hard: kernel gửi SIGXCPU ở soft, SIGKILL ở hard
        _set(resource.RLIMIT_CPU, cpu_seconds, cpu_seconds + 1)
    for res, val in (
        (resource.RLIMIT_AS, memory_bytes),
        (resource.RLIMIT_NOFILE, nofile),
        (resource.RLIMIT_FSIZE, fsize_bytes),
    ):
        if val:
            _set(res, val, val)
