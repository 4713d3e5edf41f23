from pathlib import Path
from typing import List, Optional


class LanguageRunner:
    """Dựng lệnh compile/run cho một ngôn ngữ. Không tự chạy process."""

    name: str = ""
    ext: str = ""

    def compile_command(self, source: Path, binary: Path) -> Optional[List[str]]:
        return None

    def run_command(self, source: Path, binary: Path) -> List[str]:
        raise NotImplementedError
