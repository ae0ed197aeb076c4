"""
context.py — 페이지 컨트롤러에 명시적으로 넘기는 앱 컨텍스트

저장소 핸들(카탈로그, 세션 저장소) 외의 전역 상태는 두지 않는다.
"""

from dataclasses import dataclass, field
from typing import Optional

from qcm_simulator.router import PageId, Router
from qcm_simulator.services.notifier import Notifier
from qcm_simulator.storage.catalog import Catalog
from qcm_simulator.storage.session_store import SessionStore
from qcm_simulator.views import exam_list_view, exam_view, import_view, result_view, review_view
from qcm_simulator.views.presenter import Presenter


@dataclass
class AppContext:
    catalog: Catalog
    sessions: SessionStore
    notifier: Notifier = field(default_factory=Notifier)
    presenter: Presenter = field(default_factory=Presenter)
    api_key: str = ""
    router: Router = field(init=False)

    def __post_init__(self) -> None:
        controllers = {
            PageId.EXAMS: lambda params: exam_list_view.render(self, params),
            PageId.IMPORT: lambda params: import_view.render(self, params),
            PageId.EXAM: lambda params: exam_view.render(self, params),
            PageId.SCORE: lambda params: result_view.render(self, params),
            PageId.REVIEW: lambda params: review_view.render(self, params),
            PageId.MARKED: lambda params: review_view.render(self, params, marked_only=True),
        }
        self.router = Router(controllers, commit=self.presenter.commit)

    async def navigate(self, token: Optional[str]) -> Optional[object]:
        return await self.router.navigate(token)


def build_context(database_url: str, session_dir: str) -> AppContext:
    return AppContext(catalog=Catalog(database_url), sessions=SessionStore(session_dir))
