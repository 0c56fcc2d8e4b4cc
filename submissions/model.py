from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from database import Base

class Submission(Base):
    __tablename__ = "submissions"
    # Never hand out the id of a deleted row again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False)
    message = Column(Text, nullable=False)
    image = Column(String(255), nullable=True)  # Relative reference, e.g. uploads/1700000000000-ab12cd34.png
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
