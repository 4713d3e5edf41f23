from __future__ import annotations
import re
import uuid
from pathlib import Path
from typing import Iterable


def new_job_id() -> str:
    return uuid.uuid4().hex


def job_id_of(path: Path) -> str:
    """codes/<id>.cpp -> <id>"""
    return path.name.split(".")[0]


def normalize_output(text: str) -> str:
    # chỉ bỏ whitespace đầu/cuối; khoảng trắng bên trong vẫn phải khớp
    return (text or "").strip()


def normalize_identity(identity: str) -> str:
    return (identity or "").strip().casefold()


def redact_paths(message: str, roots: Iterable[Path]) -> str:
    """Thay đường dẫn tuyệt đối phía server bằng '<job>' trước khi trả cho user."""
    if not message:
        return message
    for root in roots:
        for form in sorted({str(root), str(root.resolve())}, key=len, reverse=True):
            message = re.sub(re.escape(form) + r"[^\s:'\"]*", "<job>", message)
    return message
