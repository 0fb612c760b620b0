from sqlalchemy import Column, DateTime, Integer

from app.core.db import Base
from app.core.dates import utc_now


class BaseModel(Base):
    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
