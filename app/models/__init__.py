"""Import models so they register with the declarative base."""

from app.models.review import Review  # noqa: F401
from app.models.toilet import Toilet  # noqa: F401
from app.models.user import Role, User  # noqa: F401
from app.models.vote import Vote, VoteType  # noqa: F401
