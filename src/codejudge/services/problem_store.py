from __future__ import annotations
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Set
import uuid

from sqlalchemy import UniqueConstraint
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, Field, create_engine, Session, select

from ..core.errors import NotFoundError
from ..core.models import TestCase

# dialect hỗ trợ INSERT ... ON CONFLICT DO NOTHING
_INSERT_BY_DIALECT = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def insert_ignoring_conflicts(dialect_name: str, table, index_elements: List[str], **values):
    try:
        insert = _INSERT_BY_DIALECT[dialect_name]
    except KeyError:
        raise NotImplementedError(f"atomic insert not supported for dialect: {dialect_name}") from None
    return insert(table).values(**values).on_conflict_do_nothing(index_elements=index_elements)


class Problem(SQLModel, table=True):
    id: str = Field(primary_key=True)
    title: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


class TestCaseRow(SQLModel, table=True):
    __tablename__ = "testcase"

    id: Optional[int] = Field(default=None, primary_key=True)
    problem_id: str = Field(foreign_key="problem.id", index=True)
    position: int
    input: str
    expected_output: str
    is_sample: bool = False


class Acceptance(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("problem_id", "identity", name="uq_acceptance_problem_identity"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    problem_id: str = Field(foreign_key="problem.id", index=True)
    identity: str
    accepted_at: datetime = Field(default_factory=_utcnow)


class ProblemStore:
    def __init__(self, url="sqlite:///./codejudge.db"):
        # connect_args chỉ dành cho sqlite3
        connect_args = {"check_same_thread": False, "timeout": 30} if url.startswith("sqlite") else {}
        self.engine = create_engine(url, connect_args=connect_args)
        if self.engine.dialect.name not in _INSERT_BY_DIALECT:
            raise NotImplementedError(f"unsupported database dialect: {self.engine.dialect.name}")
        SQLModel.metadata.create_all(self.engine)
        # tạo Session factory với expire_on_commit=False
        self.SessionLocal = sessionmaker(bind=self.engine, class_=Session, expire_on_commit=False)

    def create_problem(self, title: str, test_cases: Iterable[TestCase], problem_id: Optional[str] = None) -> str:
        pid = problem_id or uuid.uuid4().hex[:12]
        with self.SessionLocal() as s:
            s.add(Problem(id=pid, title=title))
            # position giữ đúng thứ tự test case lúc tạo
            for pos, tc in enumerate(test_cases, start=1):
                s.add(TestCaseRow(problem_id=pid, position=pos, input=tc.input,
                                  expected_output=tc.expected_output, is_sample=tc.is_sample))
            s.commit()
        return pid

    def get_problem(self, problem_id: str) -> Problem:
        with self.SessionLocal() as s:
            p = s.get(Problem, problem_id)
        if p is None:
            raise NotFoundError(f"problem_not_found:{problem_id}")
        return p

    def get_test_cases(self, problem_id: str) -> List[TestCase]:
        self.get_problem(problem_id)
        with self.SessionLocal() as s:
            rows = s.exec(
                select(TestCaseRow)
                .where(TestCaseRow.problem_id == problem_id)
                .order_by(TestCaseRow.position)
            ).all()
        return [TestCase(input=r.input, expected_output=r.expected_output, is_sample=r.is_sample) for r in rows]

    def get_accepted_identities(self, problem_id: str) -> Set[str]:
        self.get_problem(problem_id)
        with self.SessionLocal() as s:
            rows = s.exec(select(Acceptance.identity).where(Acceptance.problem_id == problem_id)).all()
        return set(rows)

    def append_accepted_identity(self, problem_id: str, identity: str) -> bool:
        """
        Thêm identity vào tập accepted bằng một câu INSERT ... ON CONFLICT DO NOTHING,
        không đọc-rồi-ghi. Trả True nếu vừa thêm mới, False nếu đã có.
        """
        self.get_problem(problem_id)
        stmt = insert_ignoring_conflicts(
            self.engine.dialect.name,
            Acceptance.__table__,
            ["problem_id", "identity"],
            problem_id=problem_id, identity=identity, accepted_at=_utcnow(),
        )
        with self.engine.begin() as conn:
            res = conn.execute(stmt)
        return res.rowcount == 1
