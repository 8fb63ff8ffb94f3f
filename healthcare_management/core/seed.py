from sqlalchemy.orm import Session
import logging

from ..models.doctor import Doctor, DoctorSpecialization
from ..models.specialization import Specialization

logger = logging.getLogger(__name__)

DEFAULT_SPECIALIZATIONS = {
    "Cardiology": "heart,chest pain,palpitations,blood pressure,shortness of breath",
    "Dermatology": "skin,rash,itch,acne,eczema,mole",
    "Neurology": "headache,migraine,dizziness,numbness,seizure,memory",
    "Gastroenterology": "stomach,abdominal pain,nausea,diarrhea,constipation,heartburn",
    "Orthopedics": "bone,joint,back pain,knee,fracture,sprain",
    "General Practice": "fever,cough,cold,flu,fatigue,sore throat",
}

DEFAULT_DOCTORS = [
    ("Dr. Alice Smith", ["Cardiology"]),
    ("Dr. Bob Wang", ["Dermatology"]),
    ("Dr. Carla Jones", ["Neurology"]),
    ("Dr. David Okafor", ["Gastroenterology", "General Practice"]),
    ("Dr. Elena Petrova", ["Orthopedics"]),
]

def seed_database(db: Session) -> bool:
    """Insert default specializations and doctors into an empty database.

    Returns True when rows were inserted.
    """
    if db.query(Doctor).first() is not None or db.query(Specialization).first() is not None:
        return False

    specializations = {}
    for name, tags in DEFAULT_SPECIALIZATIONS.items():
        specializations[name] = Specialization(name=name, tags=tags, deleted=False)
        db.add(specializations[name])

    for name, spec_names in DEFAULT_DOCTORS:
        doctor = Doctor(name=name, deleted=False)
        doctor.doctor_specializations = [
            DoctorSpecialization(specialization=specializations[spec_name])
            for spec_name in spec_names
        ]
        db.add(doctor)

    db.commit()
    logger.info(f"Seeded {len(DEFAULT_DOCTORS)} doctors and {len(DEFAULT_SPECIALIZATIONS)} specializations")
    return True
