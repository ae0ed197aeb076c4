"""
api/routes.py — FastAPI 엔드포인트

렌더링 계층이 보내는 사용자 의도(응답, 이동, 표시, 제출, 초기화, 이름 변경, 삭제)를
페이지 컨트롤러 명령으로 실행하고, 라우터가 확정한 화면 데이터를 돌려준다.
"""

import asyncio

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from config import MAX_IMPORT_SIZE
from qcm_simulator.context import AppContext
from qcm_simulator.errors import ValidationError
from qcm_simulator.router import DEFAULT_TOKEN
from qcm_simulator.services.explainer import explain
from qcm_simulator.views import exam_list_view, exam_view, import_view, result_view

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class ApiKeyBody(BaseModel):
    api_key: str

class NavigateBody(BaseModel):
    token: str = DEFAULT_TOKEN

class RenameBody(BaseModel):
    name: str

class AnswerBody(BaseModel):
    question_index: int
    option_index: int

class IndexBody(BaseModel):
    index: int = 0

class ExplainBody(BaseModel):
    question_text: str
    correct_answer: str


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def get_ctx(request: Request) -> AppContext:
    return request.app.state.ctx


def _snapshot(ctx: AppContext) -> dict:
    """현재 확정된 화면 + 쌓인 알림."""
    view = ctx.presenter.view
    return {
        "token": ctx.presenter.token,
        "view": view.to_record() if view is not None else None,
        "notices": [n.to_record() for n in ctx.notifier.drain()],
    }


# ── 화면 ─────────────────────────────────────────────────────────────────────

@router.get("/api/view")
async def current_view(ctx: AppContext = Depends(get_ctx)):
    if ctx.presenter.view is None:
        await ctx.navigate(ctx.router.current_token or DEFAULT_TOKEN)
    return _snapshot(ctx)


@router.post("/api/navigate")
async def navigate(body: NavigateBody, ctx: AppContext = Depends(get_ctx)):
    await ctx.navigate(body.token)
    return _snapshot(ctx)


# ── 가져오기 / 시험 관리 ─────────────────────────────────────────────────────

@router.post("/api/import")
async def api_import(
    name: str = Form(""),
    file: UploadFile = File(...),
    ctx: AppContext = Depends(get_ctx),
):
    file_bytes = await file.read()
    if len(file_bytes) > MAX_IMPORT_SIZE:
        raise HTTPException(status_code=413, detail="파일이 너무 큽니다 (최대 50MB).")
    try:
        text = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        ctx.notifier.error("Invalid JSON structure")
        raise ValidationError("File is not UTF-8 encoded JSON") from e

    exam_id = await import_view.import_exam(ctx, name, file.filename or "", text)
    return {"examId": exam_id, **_snapshot(ctx)}


@router.post("/api/exams/{exam_id}/rename")
async def rename_exam(exam_id: str, body: RenameBody, ctx: AppContext = Depends(get_ctx)):
    await exam_list_view.rename_exam(ctx, exam_id, body.name)
    return _snapshot(ctx)


@router.delete("/api/exams/{exam_id}")
async def delete_exam(exam_id: str, ctx: AppContext = Depends(get_ctx)):
    await exam_list_view.delete_exam(ctx, exam_id)
    return _snapshot(ctx)


# ── 시험 풀기 ────────────────────────────────────────────────────────────────

@router.post("/api/exams/{exam_id}/answer")
async def select_answer(exam_id: str, body: AnswerBody, ctx: AppContext = Depends(get_ctx)):
    await exam_view.select_answer(ctx, exam_id, body.question_index, body.option_index)
    return _snapshot(ctx)


@router.post("/api/exams/{exam_id}/move")
async def move_question(exam_id: str, body: IndexBody, ctx: AppContext = Depends(get_ctx)):
    await exam_view.move_question(ctx, exam_id, body.index)
    return _snapshot(ctx)


@router.post("/api/exams/{exam_id}/mark")
async def toggle_mark(exam_id: str, body: IndexBody, ctx: AppContext = Depends(get_ctx)):
    await exam_view.toggle_mark(ctx, exam_id, body.index)
    return _snapshot(ctx)


@router.post("/api/exams/{exam_id}/finalize")
async def finish_exam(exam_id: str, ctx: AppContext = Depends(get_ctx)):
    await exam_view.finish_exam(ctx, exam_id)
    return _snapshot(ctx)


@router.post("/api/exams/{exam_id}/reset")
async def retake_exam(exam_id: str, ctx: AppContext = Depends(get_ctx)):
    await result_view.retake(ctx, exam_id)
    return _snapshot(ctx)


# ── AI 해설 ──────────────────────────────────────────────────────────────────

@router.post("/api/set-api-key")
async def set_api_key(body: ApiKeyBody, ctx: AppContext = Depends(get_ctx)):
    key = body.api_key.strip()
    if not key:
        raise HTTPException(status_code=400, detail="API 키가 비어 있습니다.")
    if not key.startswith(("sk-", "sk-proj-")):
        raise HTTPException(status_code=400, detail="올바른 OpenAI API 키 형식이 아닙니다 (sk-... 형식).")
    ctx.api_key = key
    return {"ok": True}


@router.post("/api/explain")
async def api_explain(body: ExplainBody, ctx: AppContext = Depends(get_ctx)):
    try:
        explanation = await asyncio.to_thread(
            explain, body.question_text, body.correct_answer, ctx.api_key
        )
    except RuntimeError:
        raise HTTPException(
            status_code=503,
            detail="AI 서비스 오류가 발생했습니다. 잠시 후 다시 시도해 주세요.",
        )
    return explanation.to_record()
