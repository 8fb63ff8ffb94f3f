from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from datetime import datetime, timezone
from typing import List
import logging

from ..models.appointment import Appointment, AppointmentStatus
from ..repositories import AppointmentRepository, DoctorRepository
from ..schemas.appointment import AppointmentResponse

logger = logging.getLogger(__name__)

def _as_utc_naive(value: datetime) -> datetime:
    """Store datetimes as naive UTC."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value

class AppointmentService:
    def __init__(self, db: Session):
        self.db = db
        self.appointments = AppointmentRepository(db)
        self.doctors = DoctorRepository(db)

    def list_for_patient(self, patient_id: int) -> List[AppointmentResponse]:
        """List the patient's appointments with doctor details."""
        result = []
        for appointment in self.appointments.list_for_patient(patient_id):
            doctor = appointment.doctor
            names = [spec.name for spec in doctor.active_specializations] if doctor else []
            result.append(AppointmentResponse(
                id=appointment.id,
                doctor_id=appointment.doctor_id,
                doctor_name=doctor.name if doctor else "",
                doctor_specialization=", ".join(names),
                patient_id=appointment.patient_id,
                appointment_date=appointment.appointment_date,
                status=appointment.status
            ))
        return result

    def book(self, patient_id: int, doctor_id: int, appointment_date: datetime) -> Appointment:
        """Book an appointment with a doctor."""
        if not self.doctors.get(doctor_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Doctor not found"
            )

        appointment_date = self._validate_date(appointment_date)

        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            status=AppointmentStatus.ACTIVE,
            deleted=False
        )
        self.appointments.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)

        logger.info(f"Patient {patient_id} booked appointment {appointment.id} with doctor {doctor_id}")
        return appointment

    def cancel(self, patient_id: int, appointment_id: int) -> bool:
        """Cancel an appointment. Returns False if the patient has no such appointment."""
        appointment = self.appointments.get_for_patient(patient_id, appointment_id)
        if not appointment:
            return False

        appointment.status = AppointmentStatus.CANCELED
        self.db.commit()

        logger.info(f"Patient {patient_id} canceled appointment {appointment_id}")
        return True

    def reschedule(self, patient_id: int, appointment_id: int, appointment_date: datetime) -> bool:
        """Move an appointment to a new date. Returns False if not found."""
        appointment = self.appointments.get_for_patient(patient_id, appointment_id)
        if not appointment:
            return False

        if appointment.status == AppointmentStatus.CANCELED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Canceled appointments cannot be rescheduled"
            )

        appointment.appointment_date = self._validate_date(appointment_date)
        self.db.commit()

        logger.info(f"Patient {patient_id} rescheduled appointment {appointment_id}")
        return True

    def _validate_date(self, appointment_date: datetime) -> datetime:
        appointment_date = _as_utc_naive(appointment_date)
        if appointment_date < datetime.utcnow():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Appointment date must be in the future"
            )
        return appointment_date
