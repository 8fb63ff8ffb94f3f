"""
Query boundary for persisted entities.

Every read goes through ``active()``, which applies ``deleted == False``
explicitly instead of relying on a global filter.
"""
from sqlalchemy.orm import Session, selectinload
from typing import Generic, List, Optional, Type, TypeVar

from .models.appointment import Appointment
from .models.doctor import Doctor, DoctorSpecialization
from .models.patient import Patient
from .models.specialization import Specialization  # noqa: F401  mapper registration

ModelT = TypeVar("ModelT")

class SoftDeleteRepository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def active(self):
        """Base query excluding soft-deleted rows."""
        return self.db.query(self.model).filter(self.model.deleted == False)  # noqa: E712

    def get(self, entity_id: int) -> Optional[ModelT]:
        return self.active().filter(self.model.id == entity_id).first()

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        return entity

class DoctorRepository(SoftDeleteRepository[Doctor]):
    model = Doctor

    def list_with_specializations(self) -> List[Doctor]:
        return (
            self.active()
            .options(
                selectinload(Doctor.doctor_specializations)
                .selectinload(DoctorSpecialization.specialization)
            )
            .order_by(Doctor.id)
            .all()
        )

class PatientRepository(SoftDeleteRepository[Patient]):
    model = Patient

    def get_by_email(self, email: str) -> Optional[Patient]:
        return self.active().filter(Patient.email == email).first()

class AppointmentRepository(SoftDeleteRepository[Appointment]):
    model = Appointment

    def list_for_patient(self, patient_id: int) -> List[Appointment]:
        return (
            self.active()
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date)
            .all()
        )

    def get_for_patient(self, patient_id: int, appointment_id: int) -> Optional[Appointment]:
        return (
            self.active()
            .filter(
                Appointment.id == appointment_id,
                Appointment.patient_id == patient_id
            )
            .first()
        )
