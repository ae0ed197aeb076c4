"""
router.py — 내비게이션 토큰 파싱 + 페이지 컨트롤러 디스패치

토큰 문법 (해시 스타일 경로):
  /exams, /import, /exam/{id}, /score/{id}, /review/{id}, /marked/{id}
그 외 토큰이나 빈 토큰은 모두 /exams 로 간주한다.

컨트롤러는 비동기(카탈로그 읽기에서 대기)이므로 이전 디스패치가 끝나기 전에
새 내비게이션이 들어올 수 있다. 디스패치마다 증가하는 토큰을 잡아두고,
결과를 반영하기 직전에 최신 디스패치인지 확인해서 오래된 결과는 버린다.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


class PageId(str, Enum):
    EXAMS = "exams"
    IMPORT = "import"
    EXAM = "exam"
    SCORE = "score"
    REVIEW = "review"
    MARKED = "marked"


_STATIC_PAGES = {PageId.EXAMS.value: PageId.EXAMS, PageId.IMPORT.value: PageId.IMPORT}
_EXAM_PAGES = {
    PageId.EXAM.value: PageId.EXAM,
    PageId.SCORE.value: PageId.SCORE,
    PageId.REVIEW.value: PageId.REVIEW,
    PageId.MARKED.value: PageId.MARKED,
}

DEFAULT_TOKEN = "/exams"


@dataclass(frozen=True)
class Route:
    page: PageId
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def token(self) -> str:
        if "id" in self.params:
            return f"/{self.page.value}/{self.params['id']}"
        return f"/{self.page.value}"


def parse_token(token: Optional[str]) -> Route:
    clean = (token or "").strip().lstrip("#")
    segments = [s for s in clean.split("/") if s]

    if len(segments) == 1 and segments[0] in _STATIC_PAGES:
        return Route(_STATIC_PAGES[segments[0]])
    if len(segments) == 2 and segments[0] in _EXAM_PAGES:
        return Route(_EXAM_PAGES[segments[0]], {"id": segments[1]})
    return Route(PageId.EXAMS)


def exam_token(page: PageId, exam_id: str) -> str:
    return Route(page, {"id": exam_id}).token


Controller = Callable[[Dict[str, str]], Awaitable[object]]


class Router:
    """
    현재 토큰을 들고 있는 라우터.

    Args:
        controllers: PageId → 비동기 컨트롤러 (params → 화면 데이터).
        commit:      최신 디스패치의 결과를 받는 콜백 (token, view).
    """

    def __init__(
        self,
        controllers: Mapping[PageId, Controller],
        commit: Callable[[str, object], None],
    ) -> None:
        self._controllers = dict(controllers)
        self._commit = commit
        self._dispatch_seq = 0
        self.current_token: Optional[str] = None

    async def navigate(self, token: Optional[str]) -> Optional[object]:
        """
        토큰이 현재와 같으면 현재 페이지를 다시 렌더링(새로고침),
        다르면 토큰을 바꾸고 디스패치한다.
        """
        token = parse_token(token).token
        if token != self.current_token:
            self.current_token = token
        return await self.dispatch()

    async def refresh(self) -> Optional[object]:
        return await self.dispatch()

    async def dispatch(self) -> Optional[object]:
        """
        현재 토큰의 컨트롤러를 실행하고 결과를 반영한다.
        더 새로운 디스패치가 이미 시작되었으면 결과를 버리고 None 반환.
        """
        self._dispatch_seq += 1
        seq = self._dispatch_seq
        token = self.current_token or DEFAULT_TOKEN
        route = parse_token(token)

        view = await self._controllers[route.page](dict(route.params))

        if seq != self._dispatch_seq:
            logger.debug(f"오래된 디스패치 결과 폐기: {token} (#{seq}, 최신 #{self._dispatch_seq})")
            return None
        self._commit(token, view)
        return view
