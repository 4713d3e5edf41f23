from __future__ import annotations
from fastapi import FastAPI, HTTPException, Header
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import List, Optional

import structlog

from .core.errors import EmptySubmissionError, ExecutionError, JobFileError, NotFoundError, UnsupportedLanguageError
from .core.models import TestCase
from .services.judge import Judge

log = structlog.get_logger(__name__)


# --------- Schemas ---------
class TestCaseIn(BaseModel):
    input: str
    output: str
    is_sample: bool = False


class CreateProblemReq(BaseModel):
    title: str
    test_cases: List[TestCaseIn]


class CreateProblemRes(BaseModel):
    id: str


class SampleCase(BaseModel):
    input: str
    output: str


class ProblemRes(BaseModel):
    id: str
    title: str
    samples: List[SampleCase]
    acceptances: int


class RunReq(BaseModel):
    language: str = "cpp"
    code: str
    input: str = ""


class RunRes(BaseModel):
    output: Optional[str] = None
    error: Optional[str] = None


class SubmitReq(BaseModel):
    language: str = "cpp"
    code: str


class VerdictRes(BaseModel):
    verdict: str
    failing_case: Optional[int] = None
    message: Optional[str] = None
    passed_cases: int = 0
    total_cases: int = 0


def create_app(judge: Judge) -> FastAPI:
    app = FastAPI(title="Code Judge API")

    # --------- Endpoints ---------

    @app.get("/health")
    def health():
        return {"ok": True, "languages": judge.executor.runners.languages()}

    @app.post("/problems", response_model=CreateProblemRes)
    def create_problem(req: CreateProblemReq):
        if not req.test_cases:
            raise HTTPException(status_code=400, detail="test_cases_required")
        pid = judge.problems.create_problem(
            req.title,
            [TestCase(input=t.input, expected_output=t.output, is_sample=t.is_sample) for t in req.test_cases],
        )
        return CreateProblemRes(id=pid)

    @app.get("/problems/{problem_id}", response_model=ProblemRes)
    def get_problem(problem_id: str):
        try:
            p = judge.problems.get_problem(problem_id)
            cases = judge.problems.get_test_cases(problem_id)
            accepted = judge.problems.get_accepted_identities(problem_id)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="problem_not_found")
        # chỉ trả về sample, test ẩn giữ kín
        samples = [SampleCase(input=c.input, output=c.expected_output) for c in cases if c.is_sample]
        return ProblemRes(id=p.id, title=p.title, samples=samples, acceptances=len(accepted))

    @app.post("/run", response_model=RunRes)
    def run_code(req: RunReq):
        try:
            out = judge.run_interactive(req.language, req.code, req.input)
        except (EmptySubmissionError, UnsupportedLanguageError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except ExecutionError as e:
            return JSONResponse(status_code=422, content=RunRes(error=e.message).model_dump())
        except JobFileError as e:
            log.error("run_io_error", err=str(e))
            raise HTTPException(status_code=500, detail="job_file_error")
        return RunRes(output=out)

    @app.post("/problems/{problem_id}/submit", response_model=VerdictRes)
    def submit(problem_id: str, req: SubmitReq, x_user_email: Optional[str] = Header(default=None)):
        if not x_user_email or not x_user_email.strip():
            raise HTTPException(status_code=401, detail="User not authenticated")
        try:
            verdict = judge.submit(problem_id, req.language, req.code, identity=x_user_email)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="problem_not_found")
        except (EmptySubmissionError, UnsupportedLanguageError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except JobFileError as e:
            log.error("submit_io_error", problem_id=problem_id, err=str(e))
            raise HTTPException(status_code=500, detail="job_file_error")
        return VerdictRes(**verdict.as_dict())

    return app
