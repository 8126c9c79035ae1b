from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..db.base import BaseModel

class Container(BaseModel):
    __tablename__ = 'container'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    code = Column(String, nullable=True, unique=True)

    sections = relationship("Section", back_populates="container", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Container {self.id} {self.name}>"
