from sqlalchemy import Column, Integer, Text
from .db import Base


class ContactRow(Base):
    __tablename__ = "contacts"
    # AUTOINCREMENT keeps ids of deleted rows from being handed out again
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    first = Column(Text, nullable=False)
    last = Column(Text, nullable=False)
    twitter = Column(Text, nullable=False)
    notes = Column(Text, nullable=False)
    favorite = Column(Integer, nullable=False)  # 0/1
    avatar = Column(Text, nullable=False)
