from sqlalchemy import Column, Integer, String, Float, BigInteger, Index
from location_hub.database.session import Base


class Location(Base):
    """위치 기록 (append-only)"""
    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=False, default=0)
    ts = Column(BigInteger, nullable=False)  # epoch ms

    __table_args__ = (
        Index("ix_locations_user_id_ts", "user_id", "ts"),
    )

    def __repr__(self):
        return f"<Location(id={self.id}, user_id={self.user_id}, ts={self.ts})>"
