"""
services/notifier.py — 알림(토스트) 채널

발행 후 잊기(fire-and-forget): emit 은 반환값이 없다.
HTTP 계층은 drain() 으로 쌓인 알림을 가져가고, 구독자는 즉시 콜백을 받는다.
"""

import logging
import threading
from collections import deque
from typing import Callable, List

from config import NOTICE_BACKLOG
from qcm_simulator.models.notice import Notice, NoticeKind

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    NoticeKind.SUCCESS: logging.INFO,
    NoticeKind.ERROR: logging.WARNING,
    NoticeKind.INFO: logging.INFO,
}


class Notifier:
    def __init__(self, backlog: int = NOTICE_BACKLOG) -> None:
        self._lock = threading.Lock()
        self._pending: deque[Notice] = deque(maxlen=backlog)
        self._subscribers: List[Callable[[Notice], None]] = []

    def subscribe(self, callback: Callable[[Notice], None]) -> None:
        self._subscribers.append(callback)

    def emit(self, kind: NoticeKind, message: str) -> None:
        notice = Notice(kind=kind, message=message)
        logger.log(_LOG_LEVELS[kind], f"[{kind.value}] {message}")
        with self._lock:
            self._pending.append(notice)
        for callback in list(self._subscribers):
            try:
                callback(notice)
            except Exception:
                logger.exception("알림 구독자 처리 중 오류")

    def success(self, message: str) -> None:
        self.emit(NoticeKind.SUCCESS, message)

    def error(self, message: str) -> None:
        self.emit(NoticeKind.ERROR, message)

    def info(self, message: str) -> None:
        self.emit(NoticeKind.INFO, message)

    def drain(self) -> List[Notice]:
        """쌓인 알림을 모두 꺼내 반환."""
        with self._lock:
            notices = list(self._pending)
            self._pending.clear()
        return notices
