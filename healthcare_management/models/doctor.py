from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Doctor(Base):
    __tablename__ = "doctors"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    deleted = Column(Boolean, default=False, nullable=False)
    
    # Timestamps
    created_at = Column(DateTime, server_default=func.now())
    
    # Relationships
    doctor_specializations = relationship(
        "DoctorSpecialization",
        back_populates="doctor",
        cascade="all, delete-orphan",
        order_by="DoctorSpecialization.specialization_id"
    )
    appointments = relationship("Appointment", back_populates="doctor")
    
    @property
    def active_specializations(self):
        """Specializations attached to this doctor that are not soft-deleted."""
        return [
            link.specialization
            for link in self.doctor_specializations
            if link.specialization is not None and not link.specialization.deleted
        ]
    
    def __repr__(self):
        return f"<Doctor(id={self.id}, name='{self.name}')>"

class DoctorSpecialization(Base):
    __tablename__ = "doctor_specializations"
    
    doctor_id = Column(Integer, ForeignKey("doctors.id"), primary_key=True)
    specialization_id = Column(Integer, ForeignKey("specializations.id"), primary_key=True)
    
    doctor = relationship("Doctor", back_populates="doctor_specializations")
    specialization = relationship("Specialization", back_populates="doctor_specializations")
    
    def __repr__(self):
        return f"<DoctorSpecialization(doctor_id={self.doctor_id}, specialization_id={self.specialization_id})>"
