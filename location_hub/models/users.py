from sqlalchemy import Column, String, BigInteger
from location_hub.database.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(String(100), nullable=False)
    token = Column(String(36), unique=True, index=True, nullable=False)
    created_at = Column(BigInteger, nullable=False)  # epoch ms

    def __repr__(self):
        return f"<User(id={self.id}, name={self.name})>"
