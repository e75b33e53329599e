from sqlalchemy import Column, DateTime, Integer, String
from hit_counter.database import Base


class Hit(Base):
    """
    Hit row for the relational storage backend.

    id is generated by the database (autoincrement), never supplied by the
    client. timestamp holds naive UTC so that comparisons against the stats
    boundaries behave the same on every SQL dialect.
    """
    __tablename__ = "hits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    user_agent = Column(String(500))
    client_address = Column(String(100))
