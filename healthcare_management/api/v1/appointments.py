from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_current_patient
from ...services.appointment_service import AppointmentService
from ...schemas.appointment import (
    AppointmentBook, AppointmentCreated, AppointmentResponse, AppointmentUpdate
)
from ...models.patient import Patient

router = APIRouter(prefix="/appointments", tags=["Appointments"])

def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Appointment not found"
    )

@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    current_patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    """List the current patient's appointments."""
    return AppointmentService(db).list_for_patient(current_patient.id)

@router.post("", response_model=AppointmentCreated)
async def book_appointment(
    booking: AppointmentBook,
    current_patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    """Book an appointment with a doctor."""
    appointment = AppointmentService(db).book(
        current_patient.id, booking.doctor_id, booking.appointment_date
    )
    return AppointmentCreated(appointment_id=appointment.id)

@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_appointment(
    appointment_id: int,
    current_patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    """Cancel one of the current patient's appointments."""
    if not AppointmentService(db).cancel(current_patient.id, appointment_id):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def reschedule_appointment(
    appointment_id: int,
    update: AppointmentUpdate,
    current_patient: Patient = Depends(get_current_patient),
    db: Session = Depends(get_db)
):
    """Move one of the current patient's appointments to a new date."""
    if not AppointmentService(db).reschedule(current_patient.id, appointment_id, update.appointment_date):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
