from sqlalchemy.orm import Session
from typing import List

from ..models.doctor import Doctor
from ..repositories import DoctorRepository
from ..schemas.doctor import DoctorSnapshot, DoctorSummary, SpecializationSnapshot
from .recommendation_service import DoctorRecommendationService, require_symptoms

def to_snapshot(doctor: Doctor) -> DoctorSnapshot:
    return DoctorSnapshot(
        id=doctor.id,
        name=doctor.name,
        specializations=[
            SpecializationSnapshot(id=spec.id, name=spec.name, tags=spec.tags)
            for spec in doctor.active_specializations
        ]
    )

class DoctorService:
    def __init__(self, db: Session):
        self.db = db
        self.doctors = DoctorRepository(db)

    def get_roster(self) -> List[DoctorSnapshot]:
        """Snapshot of all non-deleted doctors with their specializations."""
        return [to_snapshot(doctor) for doctor in self.doctors.list_with_specializations()]

    def list_doctors(self) -> List[DoctorSummary]:
        return [DoctorSummary.from_snapshot(doctor) for doctor in self.get_roster()]

    async def recommend_doctors(
        self,
        symptoms: str,
        resolver: DoctorRecommendationService
    ) -> List[DoctorSummary]:
        """Recommend doctors for the given symptom text."""
        # Reject blank input before touching the database
        require_symptoms(symptoms)

        matches = await resolver.recommend(symptoms, self.get_roster())
        return [DoctorSummary.from_snapshot(doctor) for doctor in matches]
