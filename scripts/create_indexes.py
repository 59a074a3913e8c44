"""
공간 인덱스 생성 스크립트
----------------------
반경 검색 성능 향상을 위한 인덱스 생성
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

from sqlalchemy import text  # noqa: E402

from app.db.session import engine  # noqa: E402

INDEXES = {
    # ST_DWithin 반경 검색용
    "toilets_location_gist": "CREATE INDEX IF NOT EXISTS toilets_location_gist ON toilets USING GIST (location)",
    # PostGIS가 없을 때 bounding box prefilter용
    "toilets_lat_lon_idx": "CREATE INDEX IF NOT EXISTS toilets_lat_lon_idx ON toilets (lat, lon)",
    # 숨김 처리되지 않은 화장실만 조회
    "toilets_visible_idx": "CREATE INDEX IF NOT EXISTS toilets_visible_idx ON toilets (id) WHERE is_hidden = false",
}


def create_indexes() -> None:
    """toilets 테이블 인덱스 생성."""
    print("🔧 toilets 인덱스 생성 중...")

    with engine.connect() as conn:
        for name, statement in INDEXES.items():
            if name == "toilets_location_gist" and engine.dialect.name != "postgresql":
                print(f"  - {name} 건너뜀 (PostGIS 전용)")
                continue
            print(f"  - {name} 생성 중...")
            try:
                conn.execute(text(statement))
                conn.commit()
                print(f"  ✅ {name} 생성 완료")
            except Exception as e:
                print(f"  ⚠️  {name} 생성 실패: {e}")
                conn.rollback()

        print("\n✅ 인덱스 생성 완료")

        if engine.dialect.name == "postgresql":
            print("\n📋 생성된 인덱스 목록:")
            result = conn.execute(text("""
                SELECT indexname, tablename
                FROM pg_indexes
                WHERE schemaname = 'public'
                AND tablename = 'toilets'
                ORDER BY indexname;
            """))
            for row in result:
                print(f"  - {row[1]}.{row[0]}")


if __name__ == "__main__":
    create_indexes()
