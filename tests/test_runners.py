from pathlib import Path

import pytest

from codejudge.core.errors import UnsupportedLanguageError
from codejudge.runner.registry import RunnerRegistry


def test_registry_selects_by_language_and_alias():
    reg = RunnerRegistry.from_runtimes({"cpp": "/opt/gcc/bin/g++"})
    assert reg.get("cpp").name == "cpp"
    assert reg.get("C++").name == "cpp"
    assert reg.get("py").name == "python"
    assert reg.get("c").name == "c"
    assert reg.languages() == ["c", "cpp", "python"]


def test_unknown_language():
    with pytest.raises(UnsupportedLanguageError):
        RunnerRegistry.from_runtimes().get("brainfuck")


def test_cpp_commands():
    r = RunnerRegistry.from_runtimes({"cpp": "/opt/gcc/bin/g++"}).get("cpp")
    src, out = Path("/j/codes/abc.cpp"), Path("/j/outputs/abc.out")
    assert r.compile_command(src, out) == ["/opt/gcc/bin/g++", "-O2", "-std=c++17", "/j/codes/abc.cpp", "-o", "/j/outputs/abc.out"]
    assert r.run_command(src, out) == ["/j/outputs/abc.out"]


def test_python_runs_source_directly():
    r = RunnerRegistry.from_runtimes({"python": "/usr/bin/python3"}).get("python")
    src, out = Path("/j/codes/abc.py"), Path("/j/outputs/abc.out")
    assert r.run_command(src, out) == ["/usr/bin/python3", "/j/codes/abc.py"]
    assert r.compile_command(src, out)[-1] == "/j/codes/abc.py"
