from enum import Enum

from pydantic import Field

from qcm_simulator.models.base import CamelModel
from qcm_simulator.models.session_state import now_ms


class NoticeKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notice(CamelModel):
    """사용자에게 보여줄 토스트 알림 한 건."""

    kind: NoticeKind
    message: str
    created_at: int = Field(default_factory=now_ms)
