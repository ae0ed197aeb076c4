"""
views/presenter.py — 라우터가 확정한 화면 데이터를 보관하고 구독자에게 전달

렌더링 계층(브라우저, 테스트 등)은 subscribe 로 붙거나 current 를 읽는다.
"""

from typing import Callable, List, Optional, Tuple


class Presenter:
    def __init__(self) -> None:
        self._current: Optional[Tuple[str, object]] = None
        self._subscribers: List[Callable[[str, object], None]] = []

    @property
    def current(self) -> Optional[Tuple[str, object]]:
        return self._current

    @property
    def token(self) -> Optional[str]:
        return self._current[0] if self._current else None

    @property
    def view(self) -> Optional[object]:
        return self._current[1] if self._current else None

    def subscribe(self, callback: Callable[[str, object], None]) -> None:
        self._subscribers.append(callback)

    def commit(self, token: str, view: object) -> None:
        self._current = (token, view)
        for callback in list(self._subscribers):
            callback(token, view)
