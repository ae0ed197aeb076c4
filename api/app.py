"""
api/app.py — FastAPI 앱 인스턴스 + 앱 컨텍스트 수명주기 + static 파일 서빙
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from config import DATA_DIR, DATABASE_URL, SESSION_DIR, STATIC_DIR
from api.routes import router
from qcm_simulator.context import AppContext, build_context
from qcm_simulator.errors import InvalidInput, NotFoundError, QcmError, StorageError, ValidationError

logger = logging.getLogger(__name__)

# 코어 예외 → HTTP 상태 코드 (순서대로 검사)
_ERROR_STATUS = (
    (ValidationError, 422),
    (InvalidInput, 400),
    (NotFoundError, 404),
    (StorageError, 503),
)


def create_app(ctx: Optional[AppContext] = None) -> FastAPI:
    """
    ctx 를 넘기지 않으면 config 의 경로로 컨텍스트를 만든다 (테스트는 직접 주입).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if ctx is None:
            os.makedirs(DATA_DIR, exist_ok=True)
            app.state.ctx = build_context(DATABASE_URL, SESSION_DIR)
        else:
            app.state.ctx = ctx
        await app.state.ctx.catalog.init_schema()
        logger.info("카탈로그 준비 완료")
        try:
            yield
        finally:
            await app.state.ctx.catalog.dispose()

    app = FastAPI(title="QCM Simulator", docs_url=None, redoc_url=None, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(QcmError)
    async def qcm_error_handler(request: Request, exc: QcmError):
        status = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
        if status >= 500:
            logger.error(f"{request.method} {request.url.path} 실패: {exc}")
        notices = [n.to_record() for n in request.app.state.ctx.notifier.drain()]
        return JSONResponse(status_code=status, content={"detail": str(exc), "notices": notices})

    app.include_router(router)

    # static 파일 마운트 (렌더링 계층)
    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    # 루트 → index.html
    @app.get("/")
    async def serve_index():
        index_path = os.path.join(STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    return app
