from pydantic import BaseModel, ConfigDict
from typing import List, Optional

class SpecializationSnapshot(BaseModel):
    """A specialization as seen by one recommendation request."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    tags: Optional[str] = None

    def tag_list(self) -> List[str]:
        """Comma-separated tags, trimmed and lower-cased, empties dropped."""
        if not self.tags:
            return []
        return [tag.strip().lower() for tag in self.tags.split(",") if tag.strip()]

class DoctorSnapshot(BaseModel):
    """Read-only roster entry: a doctor and its non-deleted specializations."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    specializations: List[SpecializationSnapshot] = []

    @property
    def specialization_names(self) -> List[str]:
        return [spec.name for spec in self.specializations]

class DoctorSummary(BaseModel):
    id: int
    name: str
    specialization: str = ""
    specializations: List[str] = []

    @classmethod
    def from_snapshot(cls, doctor: DoctorSnapshot) -> "DoctorSummary":
        names = doctor.specialization_names
        return cls(
            id=doctor.id,
            name=doctor.name,
            specialization=", ".join(names),
            specializations=names
        )

class RecommendRequest(BaseModel):
    symptoms: str
