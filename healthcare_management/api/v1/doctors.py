from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_recommendation_service, recommendation_rate_limit_check
from ...services.doctor_service import DoctorService
from ...services.recommendation_service import DoctorRecommendationService
from ...schemas.doctor import DoctorSummary, RecommendRequest

router = APIRouter(prefix="/doctors", tags=["Doctors"])

@router.get("", response_model=List[DoctorSummary])
async def list_doctors(db: Session = Depends(get_db)):
    """List all doctors with their specializations."""
    return DoctorService(db).list_doctors()

@router.post("/recommend", response_model=List[DoctorSummary])
async def recommend_doctors(
    request: RecommendRequest,
    db: Session = Depends(get_db),
    resolver: DoctorRecommendationService = Depends(get_recommendation_service),
    _: None = Depends(recommendation_rate_limit_check)
):
    """Recommend doctors for free-text symptoms."""
    return await DoctorService(db).recommend_doctors(request.symptoms, resolver)
