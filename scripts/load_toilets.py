"""
화장실 데이터 적재 스크립트
-----------------------
OSM 노드 JSONL ({"id", "lat", "lon", "tags"} per line)을 읽어서 PostgreSQL에 저장합니다.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# 환경 변수 로드
from dotenv import load_dotenv

BACKEND_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(BACKEND_ROOT / ".env")

# backend 모듈 import를 위해 경로 추가
sys.path.insert(0, str(BACKEND_ROOT))

from app import models  # noqa: F401,E402
from app.core.config import settings  # noqa: E402
from app.core.logging import setup_logging  # noqa: E402
from app.db.session import SessionLocal  # noqa: E402
from app.services.importer import import_toilets  # noqa: E402


def iter_jsonl(path: Path):
    """JSONL 파일을 한 줄씩 읽어 dict로 yield."""
    with path.open("r", encoding="utf-8") as fp:
        for line in fp:
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                continue


def main() -> None:
    parser = argparse.ArgumentParser(description="toilets.jsonl → PostgreSQL 적재")
    parser.add_argument(
        "--file",
        type=Path,
        default=Path("toilets.jsonl"),
        help="OSM 노드 JSONL 파일 경로 (기본: ./toilets.jsonl)",
    )
    args = parser.parse_args()

    if not args.file.exists():
        raise SystemExit(f"파일을 찾을 수 없습니다: {args.file}")

    setup_logging(settings.log_level)
    db = SessionLocal()
    try:
        print(f"📖 {args.file}에서 화장실 데이터 로드 중...")
        imported, skipped, failed = import_toilets(db, iter_jsonl(args.file))

        print("\n" + "=" * 60)
        print("화장실 적재 완료")
        print("=" * 60)
        print(f"  성공: {imported}개")
        print(f"  건너뜀: {skipped}개")
        print(f"  실패: {failed}개")
        print("=" * 60)
    finally:
        db.close()


if __name__ == "__main__":
    main()
