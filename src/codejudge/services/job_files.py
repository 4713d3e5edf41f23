from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional

import structlog

from ..core.errors import JobFileError
from ..core.models import FileKind
from ..core.utils import new_job_id, job_id_of

log = structlog.get_logger(__name__)


class JobFileStore:
    """
    Lưu file job trên filesystem theo cấu trúc:
      <jobs_dir>/
        ├─ codes/<id>.<ext>    (source user gửi)
        ├─ inputs/<id>.txt     (stdin cho lần chạy)
        └─ outputs/<id>.out    (binary sau khi compile, id lấy từ source)
    Mỗi lần materialize sinh một id mới, source và input không dùng chung id.
    """

    def __init__(self, jobs_dir: Path, keep_artifacts: bool = False):
        # đảm bảo là absolute path
        self.jobs_dir = jobs_dir if jobs_dir.is_absolute() else jobs_dir.resolve()
        self.keep_artifacts = keep_artifacts
        self.codes_dir = self.jobs_dir / "codes"
        self.inputs_dir = self.jobs_dir / "inputs"
        self.outputs_dir = self.jobs_dir / "outputs"

    def _dir_for(self, kind: FileKind) -> Path:
        return self.codes_dir if kind is FileKind.SOURCE else self.inputs_dir

    def materialize(self, kind: FileKind, content: str, ext: Optional[str] = None) -> Path:
        ext = (ext or ("txt" if kind is FileKind.INPUT else "src")).lstrip(".")
        target_dir = self._dir_for(kind)
        path = target_dir / f"{new_job_id()}.{ext}"
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            # newline="" để ghi nguyên văn, không đổi \n
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except OSError as e:
            log.error("materialize_failed", kind=kind.value, path=str(path), err=str(e))
            raise JobFileError(f"cannot write job file {path}: {e}") from e
        log.debug("materialized", kind=kind.value, path=str(path))
        return path

    def binary_path(self, source_path: Path) -> Path:
        self.outputs_dir.mkdir(parents=True, exist_ok=True)
        return self.outputs_dir / f"{job_id_of(source_path)}.out"

    def remove(self, paths: List[Path]) -> None:
        for p in paths:
            try:
                p.unlink(missing_ok=True)
            except OSError as e:
                log.warning("cleanup_failed", path=str(p), err=str(e))

    @contextmanager
    def scope(self) -> Iterator["JobScope"]:
        """File tạo trong scope bị xoá khi ra khỏi scope (kể cả khi lỗi)."""
        sc = JobScope(self)
        try:
            yield sc
        finally:
            if self.keep_artifacts:
                log.info("artifacts_kept", files=[str(p) for p in sc.paths])
            else:
                self.remove(sc.paths)


class JobScope:
    def __init__(self, store: JobFileStore):
        self.store = store
        self.paths: List[Path] = []

    def materialize(self, kind: FileKind, content: str, ext: Optional[str] = None) -> Path:
        p = self.store.materialize(kind, content, ext)
        self.paths.append(p)
        if kind is FileKind.SOURCE:
            self.paths.append(self.store.binary_path(p))
        return p
