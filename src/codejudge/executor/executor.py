from __future__ import annotations
import os
import signal
import subprocess
import tempfile
import time
from pathlib import Path
from typing import BinaryIO, Optional

import structlog

from ..core.errors import ExecutionError
from ..core.models import ExecOutcome, Job, Limits, Outcome
from ..core.utils import job_id_of
from ..runner.registry import RunnerRegistry
from ..runner.rlimits import apply_rlimits
from ..services.job_files import JobFileStore
from .base import ExecSpec, ProcResult

log = structlog.get_logger(__name__)


def _decode(b: bytes) -> str:
    return b.decode("utf-8", errors="replace")


def _kill_group(pgid: int) -> None:
    try:
        os.killpg(pgid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


class Executor:
    """
    Compile và run tách thành hai bước, mỗi bước trả về ExecOutcome:
      - compile():  SUCCESS | COMPILE_FAILURE
      - execute():  SUCCESS | RUNTIME_FAILURE | TIME_LIMIT_EXCEEDED
    run() giữ hợp đồng cũ: compile + execute, trả stdout hoặc raise ExecutionError.
    """

    def __init__(self, files: JobFileStore, runners: RunnerRegistry, limits: Optional[Limits] = None,
                 *, stderr_is_fatal: bool = True):
        self.files = files
        self.runners = runners
        self.limits = limits or Limits()
        self.stderr_is_fatal = stderr_is_fatal

    def make_job(self, source_path: Path, language: str) -> Job:
        # binary lấy id từ tên file source
        self.runners.get(language)
        return Job(
            job_id=job_id_of(source_path),
            language=language,
            source_path=source_path,
            binary_path=self.files.binary_path(source_path),
        )

    # ------------ process ------------

    def _spawn(self, spec: ExecSpec, stdin: Optional[BinaryIO]) -> ProcResult:
        cap = self.limits.max_output_bytes
        with tempfile.TemporaryFile() as out, tempfile.TemporaryFile() as err:
            start = time.monotonic()
            p = subprocess.Popen(
                spec.cmd,
                stdin=stdin if stdin is not None else subprocess.DEVNULL,
                stdout=out,
                stderr=err,
                cwd=str(spec.workdir),
                env={**os.environ, **spec.env},
                preexec_fn=spec.preexec,
                start_new_session=True,
            )
            timed_out = False
            try:
                p.wait(timeout=spec.timeout_s)
            except subprocess.TimeoutExpired:
                timed_out = True
                _kill_group(p.pid)
                p.wait()
            dur = time.monotonic() - start
            # dọn cả process con còn sót lại trong group (kể cả khi exit bình thường)
            _kill_group(p.pid)

            out.seek(0)
            err.seek(0)
            return ProcResult(rc=p.returncode, stdout=out.read(cap + 1), stderr=err.read(cap),
                              timed_out=timed_out, duration_s=dur)

    # ------------ steps ------------

    def compile(self, job: Job) -> ExecOutcome:
        runner = self.runners.get(job.language)
        cmd = runner.compile_command(job.source_path, job.binary_path)
        if not cmd:
            return ExecOutcome(Outcome.SUCCESS)

        spec = ExecSpec(cmd=cmd, workdir=self.files.jobs_dir, timeout_s=self.limits.compile_timeout_seconds)
        try:
            res = self._spawn(spec, None)
        except OSError as e:
            log.error("compile_spawn_failed", job_id=job.job_id, cmd=cmd, err=str(e))
            return ExecOutcome(Outcome.COMPILE_FAILURE, message=f"runner_error:{e}", rc=-1)

        if res.timed_out:
            outcome = ExecOutcome(Outcome.COMPILE_FAILURE, message="compile_timeout", rc=res.rc,
                                  duration_s=res.duration_s)
        elif res.rc != 0:
            diag = (_decode(res.stderr) + _decode(res.stdout)).strip()
            outcome = ExecOutcome(Outcome.COMPILE_FAILURE, message=diag or f"exit_{res.rc}", rc=res.rc,
                                  duration_s=res.duration_s)
        else:
            # warning của compiler không làm fail bước compile
            outcome = ExecOutcome(Outcome.SUCCESS, rc=0, duration_s=res.duration_s)

        log.info("compiled", job_id=job.job_id, lang=job.language, outcome=outcome.outcome.value,
                 rc=outcome.rc, duration_s=round(outcome.duration_s, 3))
        return outcome

    def _preexec(self):
        lim = self.limits

        def _fn():
            apply_rlimits(lim.cpu_seconds, lim.memory_bytes, lim.nofile, lim.max_output_bytes + 1)

        return _fn

    def execute(self, job: Job, input_path: Path) -> ExecOutcome:
        runner = self.runners.get(job.language)
        lim = self.limits
        spec = ExecSpec(
            cmd=runner.run_command(job.source_path, job.binary_path),
            workdir=self.files.jobs_dir,
            timeout_s=lim.wall_timeout_seconds,
            env={"PYTHONDONTWRITEBYTECODE": "1"},
            preexec=self._preexec(),
        )
        try:
            with open(input_path, "rb") as stdin:
                res = self._spawn(spec, stdin)
        except OSError as e:
            log.error("run_spawn_failed", job_id=job.job_id, err=str(e))
            return ExecOutcome(Outcome.RUNTIME_FAILURE, message=f"runner_error:{e}", rc=-1)

        outcome = self._classify(res)
        log.info("executed", job_id=job.job_id, input=input_path.name, outcome=outcome.outcome.value,
                 rc=outcome.rc, duration_s=round(outcome.duration_s, 3))
        return outcome

    def _classify(self, res: ProcResult) -> ExecOutcome:
        lim = self.limits
        stdout, stderr = _decode(res.stdout), _decode(res.stderr)

        def fail(kind: Outcome, message: str) -> ExecOutcome:
            return ExecOutcome(kind, stdout=stdout, message=message, rc=res.rc, duration_s=res.duration_s)

        if res.timed_out:
            return fail(Outcome.TIME_LIMIT_EXCEEDED, f"timeout_{lim.wall_timeout_seconds:g}s")
        # SIGXCPU ở soft limit; SIGKILL ở hard limit nếu chương trình bỏ qua SIGXCPU
        if res.rc == -signal.SIGXCPU or (res.rc == -signal.SIGKILL and res.duration_s >= lim.cpu_seconds):
            return fail(Outcome.TIME_LIMIT_EXCEEDED, f"cpu_limit_{lim.cpu_seconds}s")
        if len(res.stdout) > lim.max_output_bytes or res.rc == -signal.SIGXFSZ:
            return fail(Outcome.RUNTIME_FAILURE, "output_limit_exceeded")
        if res.rc != 0:
            reason = f"exit_{res.rc}"
            return fail(Outcome.RUNTIME_FAILURE, f"{reason}\n{stderr.strip()}" if stderr.strip() else reason)
        if stderr and self.stderr_is_fatal:
            # chương trình exit 0 nhưng có ghi stderr => vẫn tính là lỗi
            return fail(Outcome.RUNTIME_FAILURE, f"Stderr: {stderr}")
        return ExecOutcome(Outcome.SUCCESS, stdout=stdout, rc=0, duration_s=res.duration_s)

    # ------------ compile + run ------------

    def run(self, source_path: Path, input_path: Path, language: str) -> str:
        job = self.make_job(source_path, language)
        res = self.compile(job)
        if res.ok:
            res = self.execute(job, input_path)
        if not res.ok:
            raise ExecutionError(res.message, res)
        return res.stdout
