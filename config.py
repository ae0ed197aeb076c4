import os
import sys

# 기본 디렉토리 설정 (PyInstaller 번들 실행 시 _MEIPASS 사용)
IF_FROZEN = getattr(sys, "frozen", False)
BASE_DIR = sys._MEIPASS if IF_FROZEN else os.path.dirname(os.path.abspath(__file__))

# 경로 설정 (데이터/로그는 번들 밖 사용자 디렉토리)
STATIC_DIR = os.path.join(BASE_DIR, "static")
DATA_DIR = os.getenv("QCM_DATA_DIR", os.path.join(BASE_DIR, "data"))
SESSION_DIR = os.path.join(DATA_DIR, "sessions")
LOG_FILE = os.path.join(DATA_DIR, "launch.log")

# 카탈로그 DB (시험 + 문제)
DATABASE_URL = os.getenv(
    "QCM_DATABASE_URL",
    "sqlite+aiosqlite:///" + os.path.join(DATA_DIR, "qcm.db"),
)

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_PORT = int(os.getenv("QCM_PORT", "0"))          # 0 이면 빈 포트 자동 선택
DEFAULT_TIMEOUT = 15.0
OPEN_BROWSER = os.getenv("QCM_NO_BROWSER", "") == ""

# OpenAI 설정 (AI 해설 패널)
MODEL_NAME = "gpt-4o-mini"

# 문제 가져오기 설정
OPTION_COUNT = 6                    # 문제당 보기 수 (고정)
OPTION_PLACEHOLDER = "n/a"          # 부족한 보기를 채우는 값
DEFAULT_STEM = "Untitled question"  # 발문이 없을 때 기본값
MAX_IMPORT_SIZE = 50 * 1024 * 1024  # 50 MB

# 알림 채널에 보관할 최대 알림 수
NOTICE_BACKLOG = 20
