"""
main.py — QCM Simulator 데스크톱 앱 진입점

로컬 서버를 띄우고 브라우저를 앱 창으로 연다. 모든 데이터는 이 기기에만 저장된다.

환경 변수:
  QCM_DATA_DIR     카탈로그 DB / 세션 파일 / 로그 위치
  QCM_PORT         고정 포트 (기본: 빈 포트 자동 선택)
  QCM_NO_BROWSER   값이 있으면 브라우저를 열지 않음 (서버만 실행)
"""

import logging
import os
import socket
import subprocess
import sys
import threading
import time
import webbrowser
from typing import Optional

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

import uvicorn

from config import (
    BASE_DIR,
    DATA_DIR,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    LOG_FILE,
    OPEN_BROWSER,
)

logger = logging.getLogger(__name__)

# 윈도우 앱 창 모드로 열 브라우저 후보 (없으면 기본 브라우저)
_APP_BROWSERS = (
    r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files\Microsoft\Edge\Application\msedge.exe",
    r"C:\Program Files (x86)\Microsoft\Edge\Application\msedge.exe",
)
_START_PAGE = "#/exams"


class DummyStream:
    """--noconsole 번들에서 sys.stdout/stderr 가 None 일 때 대체."""
    def write(self, data): pass
    def flush(self): pass
    def isatty(self): return False
    def close(self): pass


# ── 로깅 설정 ────────────────────────────────────────────────────────────────

def _configure_logging() -> None:
    if sys.stdout is None: sys.stdout = DummyStream()
    if sys.stderr is None: sys.stderr = DummyStream()

    fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    try:
        os.makedirs(DATA_DIR, exist_ok=True)
        logging.basicConfig(
            level=logging.INFO,
            format=fmt,
            handlers=[
                logging.FileHandler(LOG_FILE, encoding="utf-8"),
                logging.StreamHandler(sys.stdout),
            ],
        )
    except PermissionError:
        # 로그 파일 점유 시 콘솔 출력만 사용
        logging.basicConfig(level=logging.INFO, format=fmt)


# ── 서버 ─────────────────────────────────────────────────────────────────────

def _pick_port() -> int:
    if DEFAULT_PORT:
        return DEFAULT_PORT
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]


def _build_server(port: int) -> uvicorn.Server:
    from api.app import create_app

    config = uvicorn.Config(create_app(), host=DEFAULT_HOST, port=port, log_level="warning")
    return uvicorn.Server(config)


def _serve(server: uvicorn.Server) -> None:
    try:
        server.run()
    except Exception:
        logger.exception("서버 오류 발생")


def _wait_until_listening(port: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        try:
            with socket.create_connection((DEFAULT_HOST, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False


# ── 브라우저 ─────────────────────────────────────────────────────────────────

def _find_app_browser() -> Optional[str]:
    return next((path for path in _APP_BROWSERS if os.path.exists(path)), None)


def _open_browser(base_url: str) -> None:
    url = base_url + _START_PAGE
    browser = _find_app_browser()
    if browser is None:
        webbrowser.open(url)
        return
    logger.info(f"앱 창 모드로 실행: {browser}")
    subprocess.Popen([browser, f"--app={url}", "--no-first-run", "--window-size=1280,800"])


# ── 메인 실행 ────────────────────────────────────────────────────────────────

def main() -> int:
    _configure_logging()
    logger.info("=== QCM Simulator Started ===")
    os.chdir(BASE_DIR)

    port = _pick_port()
    server = _build_server(port)
    server_thread = threading.Thread(target=_serve, args=(server,), daemon=True)
    server_thread.start()

    if not _wait_until_listening(port):
        logger.error(f"서버가 {DEFAULT_TIMEOUT:.0f}초 안에 시작되지 않았습니다 (port {port}).")
        return 1

    base_url = f"http://{DEFAULT_HOST}:{port}/"
    logger.info(f"서버 준비 완료: {base_url}")
    if OPEN_BROWSER:
        _open_browser(base_url)

    try:
        while server_thread.is_alive():
            server_thread.join(timeout=1.0)
    except KeyboardInterrupt:
        logger.info("사용자에 의해 종료되었습니다.")
        server.should_exit = True
        server_thread.join(timeout=DEFAULT_TIMEOUT)
    return 0


if __name__ == "__main__":
    sys.exit(main())
