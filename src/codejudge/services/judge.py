from __future__ import annotations
import dataclasses
from typing import List, Optional

import structlog

from ..core.errors import EmptySubmissionError, ExecutionError, NotFoundError
from ..core.models import ExecOutcome, FileKind, Job, Limits, TestCase, Verdict
from ..core.utils import normalize_output, redact_paths
from ..executor.executor import Executor
from ..runner.registry import RunnerRegistry
from ..settings import Settings
from .acceptance import AcceptanceRecorder
from .job_files import JobFileStore, JobScope
from .problem_store import ProblemStore

log = structlog.get_logger(__name__)


class Judge:
    """
    Orchestrator: ghép JobFileStore + Executor + ProblemStore + AcceptanceRecorder.
      - run_interactive(): chạy thử với input tự nhập, không so sánh
      - submit(): chấm lần lượt từng test case, dừng ở case fail đầu tiên
    """

    def __init__(self, files: JobFileStore, executor: Executor, problems: ProblemStore,
                 recorder: AcceptanceRecorder, *, redact: bool = True):
        self.files = files
        self.executor = executor
        self.problems = problems
        self.recorder = recorder
        self.redact = redact

    @classmethod
    def from_settings(cls, s: Settings) -> "Judge":
        files = JobFileStore(s.jobs_dir, keep_artifacts=s.keep_artifacts)
        executor = Executor(
            files,
            RunnerRegistry.from_runtimes(s.runtimes),
            Limits.from_dict(s.limits),
            stderr_is_fatal=s.stderr_is_fatal,
        )
        problems = ProblemStore(s.database_url)
        return cls(files, executor, problems, AcceptanceRecorder(problems), redact=s.redact_paths)

    def _clean(self, res: ExecOutcome) -> ExecOutcome:
        if not self.redact:
            return res
        return dataclasses.replace(res, message=redact_paths(res.message, [self.files.jobs_dir]))

    @staticmethod
    def _check_code(code: str) -> None:
        if not code or not code.strip():
            raise EmptySubmissionError("Empty code!")

    # ---------- run ----------

    def run_interactive(self, language: str, code: str, input: str = "") -> str:
        self._check_code(code)
        runner = self.executor.runners.get(language)
        with self.files.scope() as sc:
            src = sc.materialize(FileKind.SOURCE, code, runner.ext)
            inp = sc.materialize(FileKind.INPUT, input or "")
            try:
                return self.executor.run(src, inp, language)
            except ExecutionError as e:
                res = self._clean(e.outcome)
                log.warning("run_failed", lang=language, outcome=res.outcome.value, rc=res.rc)
                raise ExecutionError(res.message, res) from e

    # ---------- submit ----------

    def submit(self, problem_id: str, language: str, code: str, identity: Optional[str] = None) -> Verdict:
        cases = self.problems.get_test_cases(problem_id)
        if not cases:
            raise NotFoundError(f"test_cases_not_found:{problem_id}")
        self._check_code(code)
        runner = self.executor.runners.get(language)

        blog = log.bind(problem_id=problem_id, lang=language)
        blog.info("submission_running", total_cases=len(cases))

        with self.files.scope() as sc:
            src = sc.materialize(FileKind.SOURCE, code, runner.ext)
            job = self.executor.make_job(src, language)
            res = self.executor.compile(job)
            if res.ok:
                verdict = self._run_cases(sc, job, cases)
            else:
                verdict = Verdict.from_outcome(self._clean(res), None, len(cases))

        blog.info("submission_judged", job_id=job.job_id, **verdict.as_dict())
        if verdict.accepted and identity:
            self._record(problem_id, identity)
        return verdict

    def _run_cases(self, sc: JobScope, job: Job, cases: List[TestCase]) -> Verdict:
        total = len(cases)
        for i, tc in enumerate(cases, start=1):
            inp = sc.materialize(FileKind.INPUT, tc.input)
            res = self.executor.execute(job, inp)
            if not res.ok:
                return Verdict.from_outcome(self._clean(res), i, total)
            if normalize_output(res.stdout) != normalize_output(tc.expected_output):
                return Verdict.wrong_answer(i, total)
        return Verdict.accept(total)

    def _record(self, problem_id: str, identity: str) -> None:
        # lỗi ghi acceptance chỉ log, không đổi verdict đã chấm
        try:
            self.recorder.record(problem_id, identity)
        except Exception:
            log.exception("acceptance_record_failed", problem_id=problem_id)
