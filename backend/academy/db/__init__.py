from academy.db.session import get_db, init_db, async_session_maker, atomic
from academy.db.base import Base

__all__ = ["get_db", "init_db", "async_session_maker", "atomic", "Base"]
