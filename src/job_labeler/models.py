from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

class Category(Enum):
    APPLIED = "[LBot]: Applied"
    REJECTED = "[LBot]: Reject"
    NEXT_STEPS = "[LBot]: Next steps"
    NOT_SURE = "[LBot]: Not sure"
    NOT_JOB_APPLICATION = "[LBot]: Not job app."

    @property
    def label_name(self) -> str:
        return self.value

@dataclass(frozen=True)
class MessageRecord:
    message_id: str
    thread_id: str
    subject: str
    sender: str
    body: str
    received_at: Optional[datetime] = None

class FailureReason(Enum):
    TRANSPORT_ERROR = "transport_error"
    PARSE_ERROR = "parse_error"
    EMPTY = "empty"

@dataclass(frozen=True)
class OracleResult:
    """Either the model's trimmed reply or the reason there is none."""
    text: Optional[str] = None
    failure: Optional[FailureReason] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.text is not None

    @classmethod
    def success(cls, text: str) -> "OracleResult":
        return cls(text=text)

    @classmethod
    def fail(cls, reason: FailureReason, detail: str = "") -> "OracleResult":
        return cls(failure=reason, detail=detail)

@dataclass
class BatchState:
    started_at: float
    budget_seconds: float
    thread_index: int = 0
    message_index: int = 0

    def elapsed(self, now: float) -> float:
        return now - self.started_at

    def expired(self, now: float) -> bool:
        return self.elapsed(now) >= self.budget_seconds

class RunOutcome(Enum):
    COMPLETED = "completed"
    BUDGET_EXPIRED = "budget_expired"
    FAILED = "failed"

@dataclass
class RunReport:
    outcome: RunOutcome = RunOutcome.COMPLETED
    threads_seen: int = 0
    threads_completed: int = 0
    messages_labeled: int = 0
    counts: Dict[Category, int] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (RunOutcome.COMPLETED, RunOutcome.BUDGET_EXPIRED)
