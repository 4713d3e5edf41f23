from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ---- core paths / flags ----
    jobs_dir: Path = Path("Executed-codes")
    database_url: str = "sqlite:///./codejudge.db"   # sqlite hoặc postgresql

    keep_artifacts: bool = False   # True: giữ lại file job để audit
    stderr_is_fatal: bool = True   # stderr khác rỗng => RuntimeFailure
    redact_paths: bool = True      # ẩn đường dẫn server trong message trả về user

    # ---- config files ----
    limits_file: Path = Path("conf/limits.yaml")

    # ---- runtime merged (read from YAML) ----
    limits: Dict[str, Any] = {}
    runtimes: Dict[str, str] = {}

    # env prefix CJ_*
    model_config = SettingsConfigDict(env_prefix="CJ_", extra="ignore")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        return {}
    return data if isinstance(data, dict) else {}


def load_settings() -> Settings:
    # 0) Nạp base từ env CJ_*
    s = Settings()

    # 1) Đọc conf/judge.yaml (hoặc JUDGE_CONF)
    data = _read_yaml(Path(os.environ.get("JUDGE_CONF", "conf/judge.yaml")))

    defaults = data.get("defaults") or {}
    if not isinstance(defaults, dict):
        defaults = {}

    runtimes = data.get("runtimes") or {}
    if not isinstance(runtimes, dict):
        runtimes = {}

    # 2) Merge vào Settings; env CJ_* được ưu tiên hơn YAML
    def pick(name: str, raw: Any) -> Any:
        return getattr(s, name) if f"CJ_{name.upper()}" in os.environ else raw

    s = s.model_copy(
        update={
            "jobs_dir": Path(str(pick("jobs_dir", data.get("jobs_dir", s.jobs_dir)))),
            "database_url": str(pick("database_url", data.get("database_url", s.database_url))),
            "keep_artifacts": bool(pick("keep_artifacts", defaults.get("keep_artifacts", s.keep_artifacts))),
            "stderr_is_fatal": bool(pick("stderr_is_fatal", defaults.get("stderr_is_fatal", s.stderr_is_fatal))),
            "redact_paths": bool(pick("redact_paths", defaults.get("redact_paths", s.redact_paths))),
            "runtimes": {str(k): str(v) for k, v in runtimes.items()},
        }
    )

    # 3) Đọc conf/limits.yaml (tùy chọn)
    s = s.model_copy(update={"limits": _read_yaml(s.limits_file)})
    return s
