"""
Transport to the grounded Gemini analysis service (google-genai SDK).

The SDK client is built lazily and reused, but the API key is re-read on every
request: a missing key fails fast with ConfigurationError and a rotated key
rebuilds the client.
"""
import logging
from typing import List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from verifyai.config import GEMINI_MODEL, GEMINI_TEMPERATURE, GEMINI_TIMEOUT_SECONDS, get_api_key
from verifyai.exceptions import ConfigurationError, TransportError
from verifyai.schemas.analysis_schemas import AnalysisRequest, GroundingReference, ServiceResponse
from verifyai.utils.request_composer import render_contents

logger = logging.getLogger("gemini_client")

MISSING_KEY_MESSAGE = (
    "AI Service Configuration Missing: Please set the GEMINI_API_KEY environment variable."
)


def extract_grounding_references(response) -> List[GroundingReference]:
    """Unique web URIs from the first candidate's grounding chunks, first-seen order."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    seen = set()
    refs: List[GroundingReference] = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        uri = getattr(web, "uri", None)
        if uri and uri not in seen:
            seen.add(uri)
            refs.append(GroundingReference(uri=uri))
    return refs


class GeminiClient:
    def __init__(self, model: str = GEMINI_MODEL, temperature: float = GEMINI_TEMPERATURE,
                 timeout_seconds: int = GEMINI_TIMEOUT_SECONDS):
        self.model = model
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self._client: Optional[genai.Client] = None
        self._client_key: Optional[str] = None

    def _get_client(self) -> genai.Client:
        api_key = get_api_key()
        if not api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGE)

        if self._client is None or api_key != self._client_key:
            logger.info("🔄 Initializing Gemini client")
            self._client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(timeout=self.timeout_seconds * 1000),
            )
            self._client_key = api_key
        return self._client

    def _build_config(self, request: AnalysisRequest) -> types.GenerateContentConfig:
        tools = [types.Tool(google_search=types.GoogleSearch())] if request.groundingEnabled else None
        return types.GenerateContentConfig(
            system_instruction=request.instructions,
            tools=tools,
            temperature=self.temperature,
        )

    async def analyze(self, request: AnalysisRequest) -> ServiceResponse:
        client = self._get_client()

        logger.info(
            f"Sending {len(request.documentText)} chars to {self.model} "
            f"(grounding={'on' if request.groundingEnabled else 'off'})"
        )
        try:
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=render_contents(request),
                config=self._build_config(request),
            )
        except genai_errors.APIError as e:
            logger.error(f"❌ Gemini API error {e.code}: {e.message}")
            raise TransportError(f"AI service returned {e.code}: {e.message}") from e
        except Exception as e:
            logger.error(f"❌ Gemini transport failure: {e}", exc_info=True)
            raise TransportError(str(e)) from e

        raw_text = response.text or ""
        references = extract_grounding_references(response)
        logger.info(f"Received {len(raw_text)} chars and {len(references)} grounding reference(s)")
        return ServiceResponse(rawText=raw_text, groundingReferences=references)


_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
