"""
Doctor recommendation from free-text symptoms.

Two strategies are tried in order:

1. AI-assisted: an external chat-completion endpoint picks specializations
   from the roster's specialization list. Used only when an API key is
   configured. Any failure here falls through to step 2.
2. Tag-based: each specialization's comma-separated tags are substring
   matched against the lower-cased symptom text. When nothing matches, the
   whole roster is returned.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Set
import json
import logging

import httpx

from ..core.exceptions import InvalidArgument
from ..schemas.doctor import DoctorSnapshot, SpecializationSnapshot

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_TIMEOUT = 15.0

SYSTEM_PROMPT = (
    "You are a triage assistant. Given patient symptoms, choose the most relevant "
    "doctor specializations from the provided list. Return JSON only."
)


def require_symptoms(symptoms: Optional[str]) -> str:
    """Return the symptom text, or raise InvalidArgument if it is blank."""
    if symptoms is None or not symptoms.strip():
        raise InvalidArgument("Symptoms are required.")
    return symptoms


def unique_specializations(roster: Iterable[DoctorSnapshot]) -> List[SpecializationSnapshot]:
    """Specializations across the roster, deduplicated by id, first seen wins."""
    seen: Dict[int, SpecializationSnapshot] = {}
    for doctor in roster:
        for spec in doctor.specializations:
            seen.setdefault(spec.id, spec)
    return list(seen.values())


def specialization_names(roster: Iterable[DoctorSnapshot]) -> List[str]:
    return sorted({spec.name for spec in unique_specializations(roster)})


def build_messages(names: Sequence[str], symptoms: str) -> List[Dict[str, str]]:
    lines = ["Available specializations:"]
    lines.extend(f"- {name}" for name in names)
    lines.append("")
    lines.append("Symptoms:")
    lines.append(symptoms)
    lines.append("")
    lines.append('Respond strictly as JSON: { "specializations": ["Spec1", "Spec2"] }')

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(lines) + "\n"},
    ]


def parse_ai_response(content: Optional[str]) -> List[str]:
    """
    Extract specialization names from completion text.

    Strict JSON ``{"specializations": [...]}`` is tried first. If the text is
    not a JSON object, every non-empty line (minus ``-``/``*`` bullets) is
    taken as a candidate name.
    """
    if not content or not content.strip():
        return []

    try:
        parsed = json.loads(content)
    except ValueError:
        parsed = None

    if not isinstance(parsed, dict):
        return _parse_lines(content)

    values = parsed.get("specializations")
    if not isinstance(values, list):
        return []
    return [value.strip() for value in values if isinstance(value, str) and value.strip()]


def _parse_lines(content: str) -> List[str]:
    candidates = []
    for line in content.split("\n"):
        trimmed = line.strip().strip("-").strip("*").strip()
        if trimmed:
            candidates.append(trimmed)
    return candidates


def match_by_names(roster: Sequence[DoctorSnapshot], candidates: Iterable[str]) -> List[DoctorSnapshot]:
    """Doctors with at least one specialization named like a candidate, ignoring case."""
    wanted = {name.strip().casefold() for name in candidates if name.strip()}
    if not wanted:
        return []
    return [
        doctor for doctor in roster
        if any(name.casefold() in wanted for name in doctor.specialization_names)
    ]


def match_by_tags(roster: Sequence[DoctorSnapshot], symptoms: str) -> List[DoctorSnapshot]:
    """
    Substring-match specialization tags against the symptom text.

    Returns the doctors holding a matched specialization, or the whole roster
    when no specialization matched.
    """
    symptoms_lower = symptoms.lower()
    matched: Set[int] = set()

    for spec in unique_specializations(roster):
        for tag in spec.tag_list():
            if tag in symptoms_lower:
                matched.add(spec.id)
                break

    if not matched:
        return list(roster)
    return [
        doctor for doctor in roster
        if any(spec.id in matched for spec in doctor.specializations)
    ]


def _dedupe(doctors: Iterable[DoctorSnapshot]) -> List[DoctorSnapshot]:
    seen: Set[int] = set()
    unique = []
    for doctor in doctors:
        if doctor.id not in seen:
            seen.add(doctor.id)
            unique.append(doctor)
    return unique


class DoctorRecommendationService:
    """Resolves symptom text to the relevant subset of a doctor roster."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = 0.2,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.model = model or DEFAULT_MODEL
        self.api_url = api_url
        self.timeout = timeout
        self.temperature = temperature
        self.transport = transport

    @property
    def ai_enabled(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    async def recommend(self, symptoms: str, roster: Sequence[DoctorSnapshot]) -> List[DoctorSnapshot]:
        symptoms = require_symptoms(symptoms)
        roster = _dedupe(roster)
        if not roster:
            return []

        if self.ai_enabled:
            ai_matches = await self._recommend_with_ai(symptoms, roster)
            if ai_matches:
                logger.info(f"AI recommendation matched {len(ai_matches)} doctor(s)")
                return ai_matches
            logger.info("AI recommendation unavailable, falling back to tag matching")

        return match_by_tags(roster, symptoms)

    async def _recommend_with_ai(
        self,
        symptoms: str,
        roster: Sequence[DoctorSnapshot]
    ) -> List[DoctorSnapshot]:
        try:
            content = await self._request_completion(
                build_messages(specialization_names(roster), symptoms)
            )
        except Exception as e:
            logger.warning(f"AI recommendation request failed: {e}")
            return []

        candidates = parse_ai_response(content)
        if not candidates:
            logger.warning("AI recommendation returned no usable specializations")
            return []
        return match_by_names(roster, candidates)

    async def _request_completion(self, messages: List[Dict[str, str]]) -> Optional[str]:
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(self.api_url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()

        content = data["choices"][0]["message"]["content"]
        if content is not None and not isinstance(content, str):
            raise ValueError(f"Unexpected completion content type: {type(content).__name__}")
        return content
