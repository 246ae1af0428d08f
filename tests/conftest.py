"""Shared fixtures: canned service responses and a fake analysis transport."""

import json
import os
import tempfile

# keep the file log out of the working tree during tests
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "verifyai-tests.log"))

import pytest

from verifyai.schemas.analysis_schemas import AnalysisResult, GroundingReference, ServiceResponse

SKY_TEXT = "The sky is blue. Water is wet."


def make_payload(**overrides):
    payload = {
        "plagiarismPercentage": 10,
        "grammarScore": 90,
        "overallSummary": "Mostly original.",
        "subtopics": [{"title": "Nature", "segmentIndex": 0}],
        "segments": [
            {"text": "The sky is blue. ", "type": "original"},
            {
                "text": "Water is wet.",
                "type": "plagiarism",
                "suggestions": ["Water has a wet quality.", "Water feels wet."],
                "explanation": "Common phrase found online",
            },
        ],
        "citations": ["Encyclopedia of Water (2020)"],
    }
    payload.update(overrides)
    return payload


class FakeService:
    """Stands in for GeminiClient: returns a canned response or raises."""

    def __init__(self, raw_text="", references=(), error=None):
        self.raw_text = raw_text
        self.references = list(references)
        self.error = error
        self.calls = []

    async def analyze(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return ServiceResponse(
            rawText=self.raw_text,
            groundingReferences=[GroundingReference(uri=u) for u in self.references],
        )


@pytest.fixture
def sky_payload():
    return make_payload()


@pytest.fixture
def sky_raw(sky_payload):
    return json.dumps(sky_payload)


@pytest.fixture
def sky_result(sky_payload):
    return AnalysisResult.model_validate(sky_payload)


@pytest.fixture
def sky_service(sky_raw):
    return FakeService(raw_text=sky_raw, references=["https://x.test/a"])
