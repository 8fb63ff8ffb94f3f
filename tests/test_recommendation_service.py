import asyncio
import json

import httpx
import pytest

from healthcare_management.core.exceptions import InvalidArgument
from healthcare_management.schemas.doctor import DoctorSnapshot, SpecializationSnapshot
from healthcare_management.services.recommendation_service import (
    DoctorRecommendationService,
    build_messages,
    match_by_names,
    match_by_tags,
    parse_ai_response,
    specialization_names,
)

CARDIOLOGY = SpecializationSnapshot(id=1, name="Cardiology", tags="heart,chest pain")
DERMATOLOGY = SpecializationSnapshot(id=2, name="Dermatology", tags="skin,rash")
NEUROLOGY = SpecializationSnapshot(id=3, name="Neurology", tags=" Headache , ,Dizziness ")

D1 = DoctorSnapshot(id=1, name="Dr. Alice Smith", specializations=[CARDIOLOGY])
D2 = DoctorSnapshot(id=2, name="Dr. Bob Wang", specializations=[DERMATOLOGY])
D3 = DoctorSnapshot(id=3, name="Dr. Carla Jones", specializations=[NEUROLOGY, CARDIOLOGY])
NO_SPECIALIZATION = DoctorSnapshot(id=4, name="Dr. New Hire")

ROSTER = [D1, D2]

def ids(doctors):
    return {doctor.id for doctor in doctors}

def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}

def ai_service(handler, **kwargs):
    return DoctorRecommendationService(
        api_key="test-key",
        transport=httpx.MockTransport(handler),
        **kwargs
    )


class TestSymptomValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("symptoms", ["", "   ", "\n\t", None])
    async def test_blank_symptoms_raise_invalid_argument(self, symptoms):
        with pytest.raises(InvalidArgument):
            await DoctorRecommendationService().recommend(symptoms, ROSTER)

    @pytest.mark.asyncio
    async def test_blank_symptoms_never_call_the_api(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion('{"specializations": []}'))

        with pytest.raises(InvalidArgument):
            await ai_service(handler).recommend("  ", ROSTER)
        assert calls == []


class TestTagMatching:

    def test_chest_pain_matches_cardiology_only(self):
        assert ids(match_by_tags(ROSTER, "I have chest pain")) == {D1.id}

    def test_no_tag_match_returns_whole_roster(self):
        assert ids(match_by_tags(ROSTER, "I feel generally unwell")) == {D1.id, D2.id}

    def test_matching_is_case_insensitive(self):
        assert ids(match_by_tags(ROSTER, "An itchy RASH on my arm")) == {D2.id}

    def test_tags_are_trimmed_and_empty_tags_ignored(self):
        roster = [D2, DoctorSnapshot(id=3, name="Dr. Carla Jones", specializations=[NEUROLOGY])]
        assert ids(match_by_tags(roster, "constant headache since monday")) == {3}

    def test_several_specializations_can_match(self):
        assert ids(match_by_tags(ROSTER, "chest pain and a skin rash")) == {D1.id, D2.id}

    def test_shared_specialization_matches_every_holder(self):
        roster = [D1, D2, D3]
        assert ids(match_by_tags(roster, "my heart races")) == {D1.id, D3.id}

    def test_doctor_without_specializations_is_excluded_when_something_matches(self):
        roster = [D1, NO_SPECIALIZATION]
        assert ids(match_by_tags(roster, "chest pain")) == {D1.id}

    def test_doctor_without_specializations_is_kept_when_nothing_matches(self):
        roster = [D1, NO_SPECIALIZATION]
        assert ids(match_by_tags(roster, "tired")) == {D1.id, NO_SPECIALIZATION.id}

    def test_specialization_without_tags_never_matches(self):
        untagged = SpecializationSnapshot(id=9, name="Radiology", tags=None)
        roster = [D1, DoctorSnapshot(id=9, name="Dr. Scan", specializations=[untagged])]
        assert ids(match_by_tags(roster, "radiology chest pain")) == {D1.id}

    def test_empty_roster(self):
        assert match_by_tags([], "chest pain") == []


class TestResponseParsing:

    def test_strict_json(self):
        assert parse_ai_response('{"specializations": ["Cardiology"]}') == ["Cardiology"]

    def test_strict_json_skips_blank_and_non_string_entries(self):
        content = '{"specializations": ["Cardiology", "", "  ", 3, null, "Neurology"]}'
        assert parse_ai_response(content) == ["Cardiology", "Neurology"]

    def test_json_object_without_specializations_yields_nothing(self):
        assert parse_ai_response('{"answer": "Cardiology"}') == []

    def test_bulleted_lines(self):
        content = "Here you go:\n- Cardiology\n* Neurology\n\n  -  Dermatology  \n"
        assert parse_ai_response(content) == ["Here you go:", "Cardiology", "Neurology", "Dermatology"]

    @pytest.mark.parametrize("content", [None, "", "   \n  ", "-\n*\n - \n"])
    def test_malformed_text_yields_no_candidates(self, content):
        assert parse_ai_response(content) == []

    def test_candidate_names_match_ignoring_case(self):
        doctor = DoctorSnapshot(
            id=7,
            name="Dr. Lower",
            specializations=[SpecializationSnapshot(id=7, name="cardiology")]
        )
        candidates = parse_ai_response('{"specializations":["Cardiology"]}')
        assert set(candidates) == {"Cardiology"}
        assert ids(match_by_names([doctor, D2], candidates)) == {7}


class TestPromptConstruction:

    def test_specialization_names_are_distinct_and_sorted(self):
        assert specialization_names([D3, D2, D1]) == ["Cardiology", "Dermatology", "Neurology"]

    def test_messages_list_specializations_and_symptoms(self):
        messages = build_messages(["Cardiology", "Dermatology"], "I have chest pain")

        assert [message["role"] for message in messages] == ["system", "user"]
        assert "triage assistant" in messages[0]["content"]
        user = messages[1]["content"]
        assert "- Cardiology\n- Dermatology" in user
        assert "I have chest pain" in user
        assert '"specializations"' in user


class TestAIRecommendation:

    @pytest.mark.asyncio
    async def test_ai_selection_is_used(self):
        def handler(request):
            return httpx.Response(200, json=completion('{"specializations": ["dermatology"]}'))

        result = await ai_service(handler).recommend("I have chest pain", ROSTER + [NO_SPECIALIZATION])
        assert ids(result) == {D2.id}
        assert NO_SPECIALIZATION.id not in ids(result)

    @pytest.mark.asyncio
    async def test_request_shape(self):
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion('{"specializations": ["Cardiology"]}'))

        service = ai_service(handler, model="test-model", api_url="https://llm.test/v1/chat/completions")
        await service.recommend("I have chest pain", [D2, D1])

        assert captured["url"] == "https://llm.test/v1/chat/completions"
        assert captured["auth"] == "Bearer test-key"
        body = captured["body"]
        assert body["model"] == "test-model"
        assert body["temperature"] == 0.2
        assert "- Cardiology\n- Dermatology" in body["messages"][1]["content"]

    @pytest.mark.asyncio
    async def test_lenient_parse_is_used_for_bullets(self):
        def handler(request):
            return httpx.Response(200, json=completion("- Cardiology\n- Dermatology"))

        result = await ai_service(handler).recommend("something vague", ROSTER)
        assert ids(result) == {D1.id, D2.id}

    @pytest.mark.asyncio
    async def test_malformed_completion_falls_back_to_tags(self):
        def handler(request):
            return httpx.Response(200, json=completion("- \n *"))

        result = await ai_service(handler).recommend("I have chest pain", ROSTER)
        assert ids(result) == {D1.id}

    @pytest.mark.asyncio
    async def test_unknown_specializations_fall_back_to_tags(self):
        def handler(request):
            return httpx.Response(200, json=completion('{"specializations": ["Oncology"]}'))

        result = await ai_service(handler).recommend("an itchy rash", ROSTER)
        assert ids(result) == {D2.id}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 401, 429, 500, 503])
    async def test_error_status_falls_back_to_tags(self, status_code):
        def handler(request):
            return httpx.Response(status_code, json={"error": {"message": "nope"}})

        result = await ai_service(handler).recommend("I have chest pain", ROSTER)
        assert ids(result) == {D1.id}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("envelope", [{}, {"choices": []}, {"choices": [{"text": "Cardiology"}]}, []])
    async def test_malformed_envelope_falls_back_to_tags(self, envelope):
        def handler(request):
            return httpx.Response(200, json=envelope)

        result = await ai_service(handler).recommend("I have chest pain", ROSTER)
        assert ids(result) == {D1.id}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [42, ["Cardiology"], {"specializations": ["Cardiology"]}])
    async def test_non_string_content_falls_back_to_tags(self, content):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

        result = await ai_service(handler).recommend("I have chest pain", ROSTER)
        assert ids(result) == {D1.id}

    @pytest.mark.asyncio
    async def test_non_json_body_falls_back_to_tags(self):
        def handler(request):
            return httpx.Response(200, text="<html>gateway error</html>")

        result = await ai_service(handler).recommend("I feel generally unwell", ROSTER)
        assert ids(result) == {D1.id, D2.id}

    @pytest.mark.asyncio
    async def test_network_error_falls_back_to_tags(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await ai_service(handler).recommend("I have chest pain", ROSTER)
        assert ids(result) == {D1.id}

    @pytest.mark.asyncio
    async def test_timeout_falls_back_to_tags(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = await ai_service(handler, timeout=0.1).recommend("I have chest pain", ROSTER)
        assert ids(result) == {D1.id}

    @pytest.mark.asyncio
    async def test_cancellation_is_not_swallowed(self):
        async def handler(request):
            await asyncio.sleep(10)
            return httpx.Response(200, json=completion('{"specializations": ["Cardiology"]}'))

        task = asyncio.ensure_future(ai_service(handler).recommend("I have chest pain", ROSTER))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_no_api_key_skips_the_api(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion('{"specializations": ["Dermatology"]}'))

        service = DoctorRecommendationService(api_key="  ", transport=httpx.MockTransport(handler))
        result = await service.recommend("I have chest pain", ROSTER)

        assert calls == []
        assert ids(result) == {D1.id}


class TestRecommend:

    @pytest.mark.asyncio
    async def test_empty_roster_returns_empty_list(self):
        assert await DoctorRecommendationService().recommend("chest pain", []) == []

    @pytest.mark.asyncio
    async def test_empty_roster_does_not_call_the_api(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=completion('{"specializations": ["Cardiology"]}'))

        assert await ai_service(handler).recommend("chest pain", []) == []
        assert calls == []

    @pytest.mark.asyncio
    async def test_duplicate_doctors_are_returned_once(self):
        result = await DoctorRecommendationService().recommend("chest pain", [D1, D1, D2])
        assert [doctor.id for doctor in result] == [D1.id]

    @pytest.mark.asyncio
    async def test_tag_path_is_idempotent(self):
        service = DoctorRecommendationService()
        first = await service.recommend("chest pain and rash", ROSTER)
        second = await service.recommend("chest pain and rash", ROSTER)
        assert ids(first) == ids(second) == {D1.id, D2.id}
