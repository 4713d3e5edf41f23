import sys

import pytest

from codejudge.core.models import Limits, TestCase
from codejudge.executor.executor import Executor
from codejudge.runner.registry import RunnerRegistry
from codejudge.services.acceptance import AcceptanceRecorder
from codejudge.services.job_files import JobFileStore
from codejudge.services.judge import Judge
from codejudge.services.problem_store import ProblemStore

# chạy test bằng chính interpreter hiện tại, không cần g++
PY = "python"

SUM = "a, b = map(int, input().split())\nprint(a + b)\n"
ZERO = "print(0)\n"
SYNTAX_ERROR = "print(\n"
STDERR_SUM = "import sys\na, b = map(int, input().split())\nprint(a + b)\nsys.stderr.write('debug\\n')\n"
LOOP = "while True:\n    pass\n"

ADD_CASES = [TestCase("2 2", "4"), TestCase("3 3", "6")]


def make_limits(**kw) -> Limits:
    base = dict(cpu_seconds=10, memory_bytes=1024 * 1024 * 1024, nofile=64, wall_timeout_seconds=10)
    base.update(kw)
    return Limits(**base)


@pytest.fixture
def files(tmp_path):
    return JobFileStore(tmp_path / "jobs")


@pytest.fixture
def runners():
    return RunnerRegistry.from_runtimes({"python": sys.executable})


@pytest.fixture
def executor(files, runners):
    return Executor(files, runners, make_limits())


@pytest.fixture
def store(tmp_path):
    return ProblemStore(f"sqlite:///{tmp_path / 'judge.db'}")


@pytest.fixture
def recorder(store):
    return AcceptanceRecorder(store)


@pytest.fixture
def judge(files, executor, store, recorder):
    return Judge(files, executor, store, recorder)


@pytest.fixture
def add_problem(store):
    return store.create_problem("A + B", ADD_CASES)


@pytest.fixture
def exec_counter(executor, monkeypatch):
    """Đếm số lần chạy chương trình (không tính bước compile)."""
    calls = []
    real = executor.execute

    def counting(job, input_path):
        calls.append(input_path.read_text(encoding="utf-8"))
        return real(job, input_path)

    monkeypatch.setattr(executor, "execute", counting)
    return calls
