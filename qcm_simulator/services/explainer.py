"""
services/explainer.py

AI 해설 패널 백엔드.
Public API:
  - explain(question_text, correct_answer, api_key) -> Explanation

설계 원칙:
- 코어 상태(카탈로그/세션)를 읽거나 쓰지 않는다
- API 키가 없으면 데모 응답을 돌려준다
- 일시적 API 오류는 지수 백오프로 재시도
"""

import logging
import time
from typing import Optional

from openai import APIError, OpenAI, RateLimitError

from config import MODEL_NAME
from qcm_simulator.models.base import CamelModel

logger = logging.getLogger(__name__)

# ── 상수 ─────────────────────────────────────────────────────────────────────
_MAX_API_RETRIES = 3
_BACKOFF_BASE = 1.0

DEMO_INSIGHT = (
    "Connect your own API endpoint to replace this demo response. Use the "
    "current question and the right answer to generate richer explanations."
)


class Explanation(CamelModel):
    question: str
    correct_answer: str
    insight: str
    is_demo: bool


def _make_client(api_key: str) -> Optional[OpenAI]:
    """API 키로 OpenAI 클라이언트를 생성."""
    if not api_key:
        return None
    try:
        return OpenAI(api_key=api_key)
    except Exception as e:
        logger.error(f"OpenAI 클라이언트 초기화 실패: {e}")
        return None


def explain(question_text: str, correct_answer: str, api_key: str = "") -> Explanation:
    """
    문제와 정답으로 해설을 생성한다.
    API 키가 없거나 클라이언트 생성에 실패하면 데모 응답.

    Raises:
        RuntimeError: API 호출이 재시도 후에도 실패한 경우.
    """
    client = _make_client(api_key)
    if client is None:
        return Explanation(
            question=question_text,
            correct_answer=correct_answer,
            insight=DEMO_INSIGHT,
            is_demo=True,
        )

    content = _call_openai(client, question_text, correct_answer)
    if content is None:
        raise RuntimeError("AI 해설 생성에 실패했습니다.")
    return Explanation(
        question=question_text,
        correct_answer=correct_answer,
        insight=content.strip(),
        is_demo=False,
    )


# ══════════════════════════════════════════════════════════════════════════════
# OpenAI API 호출
# ══════════════════════════════════════════════════════════════════════════════

def _build_system_prompt() -> str:
    return (
        "You are a tutor explaining multiple-choice exam questions.\n"
        "Explain in a short paragraph why the given answer is correct and, "
        "when useful, why the most tempting alternatives are wrong.\n"
        "Do not restate the question."
    )


def _call_openai(client: OpenAI, question_text: str, correct_answer: str) -> Optional[str]:
    """OpenAI Chat API 호출 + 지수 백오프 재시도."""
    user_content = f"Question:\n{question_text}\n\nCorrect answer:\n{correct_answer}"
    last_exception: Optional[Exception] = None

    for attempt in range(1, _MAX_API_RETRIES + 1):
        try:
            response = client.chat.completions.create(
                model=MODEL_NAME,
                messages=[
                    {"role": "system", "content": _build_system_prompt()},
                    {"role": "user", "content": user_content},
                ],
                temperature=0.3,
                max_tokens=600,
            )
            return response.choices[0].message.content
        except (RateLimitError, APIError) as e:
            last_exception = e
            if attempt < _MAX_API_RETRIES:
                wait = _BACKOFF_BASE * (2 ** (attempt - 1))
                logger.warning(f"API 오류, {wait:.1f}초 후 재시도 ({attempt}/{_MAX_API_RETRIES})")
                time.sleep(wait)

    logger.error(f"API 최종 실패: {last_exception}")
    return None
