from __future__ import annotations
from typing import Dict, Iterable, Optional

from ..core.errors import UnsupportedLanguageError
from .base import LanguageRunner
from .cpp_runner import CppRunner, CRunner
from .python_runner import PythonRunner

# tên ngôn ngữ/đuôi file phía FE gửi lên -> runner
ALIASES = {"c++": "cpp", "cc": "cpp", "cxx": "cpp", "py": "python", "python3": "python"}


class RunnerRegistry:
    def __init__(self, runners: Iterable[LanguageRunner]):
        self._runners: Dict[str, LanguageRunner] = {r.name: r for r in runners}

    @classmethod
    def from_runtimes(cls, runtimes: Optional[Dict[str, str]] = None) -> "RunnerRegistry":
        rt = runtimes or {}
        return cls([
            CppRunner(compiler=rt.get("cpp", "g++")),
            CRunner(compiler=rt.get("c", "gcc")),
            PythonRunner(python_bin=rt.get("python", "python3")),
        ])

    def languages(self):
        return sorted(self._runners)

    def get(self, language: str) -> LanguageRunner:
        key = (language or "").strip().lower()
        key = ALIASES.get(key, key)
        try:
            return self._runners[key]
        except KeyError:
            raise UnsupportedLanguageError(f"Unsupported language: {language}") from None
