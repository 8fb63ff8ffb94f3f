from pydantic import BaseModel
from datetime import datetime

from ..models.appointment import AppointmentStatus

class AppointmentBook(BaseModel):
    doctor_id: int
    appointment_date: datetime

class AppointmentUpdate(BaseModel):
    appointment_date: datetime

class AppointmentCreated(BaseModel):
    appointment_id: int

class AppointmentResponse(BaseModel):
    id: int
    doctor_id: int
    doctor_name: str = ""
    doctor_specialization: str = ""
    patient_id: int
    appointment_date: datetime
    status: AppointmentStatus
