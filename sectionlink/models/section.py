from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from ..db.base import BaseModel

class Section(BaseModel):
    __tablename__ = 'section'

    id = Column(Integer, primary_key=True, autoincrement=True)
    container_id = Column(Integer, ForeignKey('container.id', ondelete="CASCADE"), nullable=False)
    parent_id = Column(Integer, ForeignKey('section.id'), nullable=True)
    name = Column(String, nullable=False)
    sort = Column(Integer, nullable=False, default=500)

    container = relationship("Container", back_populates="sections")
    # Self-referential relationship
    parent = relationship("Section", remote_side=[id], backref="children")

    def __repr__(self) -> str:
        return f"<Section {self.id} {self.name!r} container={self.container_id}>"
