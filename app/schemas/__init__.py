"""Expose schemas for easier import."""

from app.schemas.review import ReviewCreate, ReviewOut  # noqa: F401
from app.schemas.toilet import ToiletCreate, ToiletOut  # noqa: F401
from app.schemas.user import RoleUpdate, UserOut  # noqa: F401
