"""
storage/session_store.py — 시험별 진행 세션 저장소 (JSON 파일)

키 `session:{examId}` 하나당 파일 하나. 모든 연산은 동기식 read-modify-write 이며
잠금 안에서 끝나므로 세션 갱신이 다른 갱신과 섞이지 않는다.
파일은 임시 파일에 쓴 뒤 os.replace 로 교체 (원자적 저장).

손상된(파싱 불가) 레코드는 "세션 없음"으로 취급하고 새로 만든다.
"""

import json
import logging
import os
import re
import tempfile
import threading

from qcm_simulator.errors import InvalidInput, StorageError
from qcm_simulator.models.session_state import ExamSession
from qcm_simulator.services import session_machine

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"^[A-Za-z0-9_-]+$")


def session_key(exam_id: str) -> str:
    return f"session:{exam_id}"


class SessionStore:
    def __init__(self, directory: str) -> None:
        self._dir = directory
        self._lock = threading.Lock()
        os.makedirs(directory, exist_ok=True)

    def _path(self, exam_id: str) -> str:
        if not _SAFE_ID.match(exam_id or ""):
            raise InvalidInput(f"Invalid exam id: {exam_id!r}")
        return os.path.join(self._dir, session_key(exam_id).replace(":", "-") + ".json")

    def exists(self, exam_id: str) -> bool:
        with self._lock:
            return os.path.exists(self._path(exam_id))

    def load(self, exam_id: str, question_count: int) -> ExamSession:
        """
        저장된 세션을 읽어 question_count 기준으로 복구해서 반환.
        저장된 세션이 없거나 손상되었으면 새 세션.
        """
        path = self._path(exam_id)
        with self._lock:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    record = json.load(f)
            except FileNotFoundError:
                return session_machine.new_session(question_count)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                logger.warning(f"손상된 세션 레코드 무시 ({session_key(exam_id)}): {e}")
                return session_machine.new_session(question_count)
            except OSError as e:
                raise StorageError(f"세션 읽기 실패: {e}") from e

        if not isinstance(record, dict):
            logger.warning(f"세션 레코드 형식 오류 무시 ({session_key(exam_id)})")
            return session_machine.new_session(question_count)
        return session_machine.repair(record, question_count)

    def save(self, exam_id: str, session: ExamSession) -> None:
        path = self._path(exam_id)
        payload = json.dumps(session.to_record(), ensure_ascii=False)
        with self._lock:
            tmp_path = None
            try:
                fd, tmp_path = tempfile.mkstemp(dir=self._dir, suffix=".tmp")
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_path, path)
                tmp_path = None
            except OSError as e:
                raise StorageError(f"세션 저장 실패: {e}") from e
            finally:
                if tmp_path is not None and os.path.exists(tmp_path):
                    os.remove(tmp_path)

    def reset(self, exam_id: str) -> None:
        """세션을 완전히 삭제 (NotStarted 로 되돌림). 없으면 아무 일도 없음."""
        path = self._path(exam_id)
        with self._lock:
            try:
                os.remove(path)
            except FileNotFoundError:
                return
            except OSError as e:
                raise StorageError(f"세션 삭제 실패: {e}") from e
        logger.info(f"세션 초기화: {session_key(exam_id)}")
