from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...api.deps import get_current_patient, rate_limit_check
from ...services.auth_service import AuthService
from ...schemas.auth import (
    PatientLogin, PatientRegister, PatientResponse, RegisterResponse, TokenResponse
)
from ...models.patient import Patient

router = APIRouter(prefix="/auth", tags=["Authentication"])

@router.post("/register", response_model=RegisterResponse)
async def register(
    patient_data: PatientRegister,
    db: Session = Depends(get_db),
    _: None = Depends(rate_limit_check)
):
    """Register a new patient."""
    auth_service = AuthService(db)
    patient = auth_service.register_patient(patient_data)
    return RegisterResponse(user_id=patient.id)

@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: PatientLogin,
    db: Session = Depends(get_db),
):
    """Authenticate patient and return an access token."""
    auth_service = AuthService(db)
    return auth_service.authenticate_patient(login_data)

@router.get("/me", response_model=PatientResponse)
async def get_current_patient_info(
    current_patient: Patient = Depends(get_current_patient)
):
    """Get current patient information."""
    return PatientResponse.model_validate(current_patient)
