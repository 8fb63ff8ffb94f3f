from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from ..core.config import settings
from ..core.database import get_db, get_redis
from ..core.security import security, verify_token, AuthenticationError, TokenPayload
from ..models.patient import Patient
from ..repositories import PatientRepository
from ..services.recommendation_service import DoctorRecommendationService

async def get_current_patient_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> TokenPayload:
    """Extract and verify JWT token from Authorization header."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    token_payload = verify_token(credentials.credentials)
    if not token_payload or not token_payload.sub:
        raise AuthenticationError("Invalid or expired token")

    return token_payload

async def get_current_patient(
    token_payload: TokenPayload = Depends(get_current_patient_token),
    db: Session = Depends(get_db)
) -> Patient:
    """Get current authenticated patient from database."""
    patient = PatientRepository(db).get(token_payload.sub)
    if not patient:
        raise AuthenticationError("Patient not found")

    return patient

def get_recommendation_service() -> DoctorRecommendationService:
    """Build the doctor recommendation resolver from settings."""
    return DoctorRecommendationService(
        api_key=settings.OPENAI_API_KEY,
        model=settings.OPENAI_MODEL,
        api_url=settings.OPENAI_API_URL,
        timeout=settings.RECOMMENDATION_TIMEOUT_SECONDS
    )

# Rate limiting dependency
async def rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis)
) -> None:
    """Basic per-client, per-endpoint rate limiting."""
    client_ip = request.client.host if request.client else "unknown"
    key = f"rate_limit:{request.url.path}:{client_ip}"

    current_requests = redis_client.get(key)
    if current_requests is None:
        redis_client.setex(key, settings.RATE_LIMIT_WINDOW_SECONDS, 1)
    else:
        if int(current_requests) >= settings.RATE_LIMIT_REQUESTS:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests. Please try again later."
            )
        redis_client.incr(key)

async def recommendation_rate_limit_check(
    request: Request,
    redis_client = Depends(get_redis),
    resolver: DoctorRecommendationService = Depends(get_recommendation_service)
) -> None:
    """Rate limit recommendations only when they can reach the external AI API."""
    if resolver.ai_enabled:
        await rate_limit_check(request, redis_client)
