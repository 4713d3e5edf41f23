import pytest

from codejudge.core.errors import EmptySubmissionError, ExecutionError, NotFoundError, UnsupportedLanguageError
from codejudge.core.models import Limits, Outcome, TestCase, VerdictKind
from codejudge.executor.executor import Executor
from codejudge.services.judge import Judge

from conftest import LOOP, PY, STDERR_SUM, SUM, SYNTAX_ERROR, ZERO, make_limits


def _leftover(files):
    return [p for d in (files.codes_dir, files.inputs_dir, files.outputs_dir) if d.exists() for p in d.iterdir()]


# ---------- run_interactive ----------

def test_run_interactive_returns_raw_output(judge):
    assert judge.run_interactive(PY, "print('  hi  ')\n", "") == "  hi  \n"


def test_run_interactive_rejects_empty_code(judge):
    with pytest.raises(EmptySubmissionError):
        judge.run_interactive(PY, "   \n", "1 2")


def test_run_interactive_unknown_language(judge):
    with pytest.raises(UnsupportedLanguageError):
        judge.run_interactive("cobol", "DISPLAY 'HI'.", "")


def test_run_interactive_redacts_job_paths(judge, files):
    with pytest.raises(ExecutionError) as ei:
        judge.run_interactive(PY, SYNTAX_ERROR, "")
    assert ei.value.kind is Outcome.COMPILE_FAILURE
    assert str(files.jobs_dir) not in ei.value.message
    assert "<job>" in ei.value.message


def test_run_interactive_cleans_up(judge, files):
    judge.run_interactive(PY, SUM, "1 1")
    with pytest.raises(ExecutionError):
        judge.run_interactive(PY, "raise SystemExit(1)\n", "")
    assert _leftover(files) == []


# ---------- submit ----------

def test_accepted(judge, add_problem, store):
    v = judge.submit(add_problem, PY, SUM, identity="alice@example.com")
    assert v.kind is VerdictKind.ACCEPTED
    assert v.passed_cases == v.total_cases == 2
    assert store.get_accepted_identities(add_problem) == {"alice@example.com"}


def test_wrong_answer_stops_at_first_case(judge, add_problem, exec_counter, store):
    v = judge.submit(add_problem, PY, ZERO, identity="bob@example.com")
    assert v.kind is VerdictKind.WRONG_ANSWER
    assert v.failing_case == 1
    assert exec_counter == ["2 2"]
    assert store.get_accepted_identities(add_problem) == set()


def test_wrong_answer_on_later_case(judge, store, exec_counter):
    pid = store.create_problem("p", [TestCase("1", "1"), TestCase("2", "4"), TestCase("3", "9")])
    v = judge.submit(pid, PY, "n = int(input())\nprint(n if n < 2 else n * 3)\n")
    assert v.kind is VerdictKind.WRONG_ANSWER
    assert v.failing_case == 2
    assert v.passed_cases == 1
    assert exec_counter == ["1", "2"]


def test_compile_failure_runs_no_case(judge, add_problem, exec_counter, files):
    v = judge.submit(add_problem, PY, SYNTAX_ERROR)
    assert v.kind is VerdictKind.COMPILE_FAILURE
    assert v.failing_case is None
    assert exec_counter == []
    assert str(files.jobs_dir) not in v.message


def test_stderr_output_is_not_accepted(judge, add_problem, exec_counter):
    v = judge.submit(add_problem, PY, STDERR_SUM, identity="carol@example.com")
    assert v.kind is VerdictKind.RUNTIME_FAILURE
    assert v.failing_case == 1
    assert v.message.startswith("Stderr:")
    assert len(exec_counter) == 1


def test_runtime_failure(judge, add_problem):
    v = judge.submit(add_problem, PY, "print(1 // 0)\n")
    assert v.kind is VerdictKind.RUNTIME_FAILURE
    assert "ZeroDivisionError" in v.message


def test_time_limit_exceeded(files, runners, store, recorder, add_problem):
    ex = Executor(files, runners, make_limits(wall_timeout_seconds=1))
    v = Judge(files, ex, store, recorder).submit(add_problem, PY, LOOP)
    assert v.kind is VerdictKind.TIME_LIMIT_EXCEEDED
    assert v.failing_case == 1


def test_cpu_bound_submission_with_default_limits(files, runners, store, recorder, add_problem):
    ex = Executor(files, runners, Limits())
    v = Judge(files, ex, store, recorder).submit(add_problem, PY, LOOP, identity="alice@example.com")
    assert v.kind is VerdictKind.TIME_LIMIT_EXCEEDED
    assert v.failing_case == 1
    assert v.passed_cases == 0
    assert not recorder.has_accepted(add_problem, "alice@example.com")


def test_comparison_trims_only_outer_whitespace(judge, store):
    pid = store.create_problem("p", [TestCase("", "1 2\n")])
    ok = judge.submit(pid, PY, "print('\\n  1 2   \\n')\n")
    assert ok.kind is VerdictKind.ACCEPTED
    bad = judge.submit(pid, PY, "print('1  2')\n")
    assert bad.kind is VerdictKind.WRONG_ANSWER


def test_unknown_problem(judge):
    with pytest.raises(NotFoundError):
        judge.submit("nope", PY, SUM)


def test_problem_without_test_cases(judge, store):
    pid = store.create_problem("empty", [])
    with pytest.raises(NotFoundError):
        judge.submit(pid, PY, SUM)


def test_submit_cleans_up_job_files(judge, add_problem, files):
    judge.submit(add_problem, PY, SUM)
    judge.submit(add_problem, PY, ZERO)
    assert _leftover(files) == []


def test_acceptance_failure_keeps_verdict(judge, add_problem, recorder, monkeypatch):
    def broken(problem_id, identity):
        raise RuntimeError("db down")

    monkeypatch.setattr(recorder, "record", broken)
    v = judge.submit(add_problem, PY, SUM, identity="dave@example.com")
    assert v.kind is VerdictKind.ACCEPTED


def test_resubmission_records_once(judge, add_problem, store):
    judge.submit(add_problem, PY, SUM, identity="erin@example.com")
    judge.submit(add_problem, PY, SUM, identity="Erin@Example.com")
    assert store.get_accepted_identities(add_problem) == {"erin@example.com"}
