"""
데이터베이스 스키마 초기화 스크립트
----------------------------------
테이블과 PostGIS location 컬럼/인덱스를 생성합니다.
"""

import sys
from pathlib import Path

# 환경 변수 로드
from dotenv import load_dotenv

# backend 폴더의 .env 파일 로드
BACKEND_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(BACKEND_ROOT / ".env")

# backend 모듈 import를 위해 경로 추가
sys.path.insert(0, str(BACKEND_ROOT))

from sqlalchemy import inspect  # noqa: E402

from app import models  # noqa: F401,E402
from app.db.init_db import init_db  # noqa: E402
from app.db.session import engine  # noqa: E402


def init_db_schema() -> None:
    """데이터베이스 스키마 초기화."""
    print("🔧 데이터베이스 스키마 초기화 중...")
    init_db(engine)
    print("✅ 테이블 생성 완료")

    print("\n📋 생성된 테이블:")
    for name in sorted(inspect(engine).get_table_names()):
        print(f"  - {name}")


if __name__ == "__main__":
    init_db_schema()
