from sqlalchemy.orm import Session
from fastapi import HTTPException, status
import logging

from ..models.patient import Patient
from ..repositories import PatientRepository
from ..core.security import verify_password, get_password_hash, create_patient_token
from ..schemas.auth import PatientLogin, PatientRegister, PatientResponse, TokenResponse

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, db: Session):
        self.db = db
        self.patients = PatientRepository(db)

    def register_patient(self, patient_data: PatientRegister) -> Patient:
        """Register a new patient."""
        # Email is already normalized by the schema
        if self.patients.get_by_email(patient_data.email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered"
            )

        new_patient = Patient(
            name=patient_data.name,
            email=patient_data.email,
            password_hash=get_password_hash(patient_data.password),
            deleted=False
        )

        self.patients.add(new_patient)
        self.db.commit()
        self.db.refresh(new_patient)

        logger.info(f"Registered patient {new_patient.id}")
        return new_patient

    def authenticate_patient(self, login_data: PatientLogin) -> TokenResponse:
        """Authenticate patient and return an access token."""
        patient = self.patients.get_by_email(login_data.email)

        if not patient or not verify_password(login_data.password, patient.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        token = create_patient_token(patient.id, patient.email, patient.name)

        return TokenResponse(
            access_token=token.access_token,
            token_type=token.token_type,
            expires_in=token.expires_in,
            user=PatientResponse.model_validate(patient)
        )
