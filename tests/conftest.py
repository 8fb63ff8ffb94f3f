import os

# Must be set before the application modules are imported
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SEED_DATABASE"] = "0"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from datetime import datetime, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from healthcare_management.main import app
from healthcare_management.api.deps import get_recommendation_service
from healthcare_management.core.database import Base, get_db, init_db, redis_client
from healthcare_management.models.doctor import Doctor, DoctorSpecialization
from healthcare_management.models.specialization import Specialization
from healthcare_management.services.recommendation_service import DoctorRecommendationService

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

def override_get_recommendation_service():
    # Tag matching only; AI tests install their own override
    return DoctorRecommendationService(api_key=None)

app.dependency_overrides[get_db] = override_get_db
app.dependency_overrides[get_recommendation_service] = override_get_recommendation_service

@pytest.fixture(autouse=True)
def reset_rate_limits():
    redis_client.flushall()
    yield

@pytest.fixture(scope="function")
def test_db():
    init_db(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(test_db):
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides[get_recommendation_service] = override_get_recommendation_service

def add_doctor(session, name, specializations, deleted=False):
    doctor = Doctor(name=name, deleted=deleted)
    doctor.doctor_specializations = [
        DoctorSpecialization(specialization=spec) for spec in specializations
    ]
    session.add(doctor)
    session.commit()
    session.refresh(doctor)
    return doctor

@pytest.fixture
def roster(db_session):
    """Two doctors: cardiology and dermatology."""
    cardiology = Specialization(name="Cardiology", tags="heart,chest pain")
    dermatology = Specialization(name="Dermatology", tags="skin,rash")
    db_session.add_all([cardiology, dermatology])
    db_session.commit()

    return {
        "cardiologist": add_doctor(db_session, "Dr. Alice Smith", [cardiology]),
        "dermatologist": add_doctor(db_session, "Dr. Bob Wang", [dermatology]),
    }

test_patient_data = {
    "name": "Test Patient",
    "email": "Patient@Example.com",
    "password": "TestPassword1!"
}

test_login_data = {
    "email": "patient@example.com",
    "password": "TestPassword1!"
}

@pytest.fixture
def auth_headers(client):
    client.post("/api/v1/auth/register", json=test_patient_data)
    response = client.post("/api/v1/auth/login", json=test_login_data)
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}

def future_date(days=3):
    return (datetime.utcnow() + timedelta(days=days)).replace(microsecond=0).isoformat()
