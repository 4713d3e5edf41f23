from pathlib import Path
from typing import List, Optional

from .base import LanguageRunner

# chỉ kiểm tra cú pháp, không sinh __pycache__ cạnh source
_SYNTAX_CHECK = "import sys; compile(open(sys.argv[1], encoding='utf-8').read(), sys.argv[1], 'exec')"


class PythonRunner(LanguageRunner):
    name = "python"
    ext = "py"

    def __init__(self, python_bin: str = "python3"):
        self.python_bin = python_bin

    def compile_command(self, source: Path, binary: Path) -> Optional[List[str]]:
        return [self.python_bin, "-c", _SYNTAX_CHECK, str(source)]

    def run_command(self, source: Path, binary: Path) -> List[str]:
        return [self.python_bin, str(source)]
