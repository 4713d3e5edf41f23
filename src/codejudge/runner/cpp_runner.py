from pathlib import Path
from typing import List, Optional

from .base import LanguageRunner


class CppRunner(LanguageRunner):
    name = "cpp"
    ext = "cpp"

    def __init__(self, compiler: str = "g++", std: str = "c++17"):
        self.compiler = compiler
        self.std = std

    def compile_command(self, source: Path, binary: Path) -> Optional[List[str]]:
        return [self.compiler, "-O2", f"-std={self.std}", str(source), "-o", str(binary)]

    def run_command(self, source: Path, binary: Path) -> List[str]:
        return [str(binary)]


class CRunner(CppRunner):
    name = "c"
    ext = "c"

    def __init__(self, compiler: str = "gcc", std: str = "c17"):
        super().__init__(compiler, std)
