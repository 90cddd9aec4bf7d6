"""ORM models.  Importing this package registers every table on ``Base.metadata``."""

from live_observatory.core.models.base import Base
from live_observatory.core.models.profiles import CreatorProfile

__all__ = ["Base", "CreatorProfile"]
