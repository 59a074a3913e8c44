"""
사용자 권한 설정 스크립트
----------------------
첫 관리자(ADMIN)를 지정할 때 사용합니다.
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

BACKEND_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(BACKEND_ROOT / ".env")

sys.path.insert(0, str(BACKEND_ROOT))

from app import models  # noqa: F401,E402
from app.db.session import SessionLocal  # noqa: E402
from app.models.user import Role  # noqa: E402
from app.services.users import get_or_create_user, set_role  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="사용자 권한 설정")
    parser.add_argument("external_id", help="identity provider user id (token sub)")
    parser.add_argument("--role", choices=[r.value for r in Role], default=Role.ADMIN.value)
    args = parser.parse_args()

    db = SessionLocal()
    try:
        get_or_create_user(db, args.external_id)
        user = set_role(db, args.external_id, Role(args.role))
        print(f"✅ {user.external_id} → {user.role.value}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
