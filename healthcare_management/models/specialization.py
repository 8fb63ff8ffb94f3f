from sqlalchemy import Column, Integer, String, Boolean, Text
from sqlalchemy.orm import relationship

from ..core.database import Base

class Specialization(Base):
    __tablename__ = "specializations"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    
    # Comma-separated keywords matched against symptom text
    tags = Column(Text, nullable=True)
    
    deleted = Column(Boolean, default=False, nullable=False)
    
    # Relationships
    doctor_specializations = relationship("DoctorSpecialization", back_populates="specialization")
    
    def __repr__(self):
        return f"<Specialization(id={self.id}, name='{self.name}')>"
