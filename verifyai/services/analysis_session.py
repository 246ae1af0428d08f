"""
Per-user analysis session: the state machine behind the integrity checker.

    IDLE -> ANALYZING -> SUCCESS | ERROR
    SUCCESS | ERROR -> IDLE (reset) or ANALYZING (resubmit)

One analysis may be in flight per session. A reset drops the outcome of a running
analysis, but its service call has to return before a new one may start.
Everything except the service call is synchronous, so a mutation always finishes
before the next one starts on the event loop. A result is committed only after
parsing, the reconstruction check and source reconciliation have all succeeded.
"""
import logging
import uuid
from typing import List, Optional, Protocol

from verifyai.config import MIN_INPUT_CHARS, STRICT_RECONSTRUCTION
from verifyai.exceptions import (
    AnalysisError,
    InputTooShortError,
    InvalidStateError,
    MalformedResponse,
    SelectionError,
    SessionBusyError,
)
from verifyai.schemas.analysis_schemas import AnalysisRequest, AnalysisResult, Segment, ServiceResponse
from verifyai.schemas.session_schemas import AnalysisStatus, ErrorInfo, SessionState
from verifyai.utils import score_recomputer
from verifyai.utils.integrity_checker import enforce_reconstruction
from verifyai.utils.request_composer import compose_request
from verifyai.utils.response_validator import parse_analysis_response
from verifyai.utils.segment_reconciler import reconcile_sources

logger = logging.getLogger("analysis_session")


class AnalysisService(Protocol):
    async def analyze(self, request: AnalysisRequest) -> ServiceResponse:
        ...


class AnalysisSession:
    def __init__(self, service: Optional[AnalysisService] = None, session_id: Optional[str] = None,
                 strict_reconstruction: bool = STRICT_RECONSTRUCTION):
        self.id = session_id or uuid.uuid4().hex
        self.strict_reconstruction = strict_reconstruction
        self._service = service

        self.status = AnalysisStatus.IDLE
        self.input_text = ""
        self.truncated = False
        self.result: Optional[AnalysisResult] = None
        self.selection_index: Optional[int] = None
        self.error: Optional[ErrorInfo] = None
        self.reconstruction_verified: Optional[bool] = None
        self.verified_sources: List[str] = []
        self._active_request: Optional[AnalysisRequest] = None
        self._in_flight = False

    @property
    def selection(self) -> Optional[Segment]:
        if self.result is None or self.selection_index is None:
            return None
        return self.result.segments[self.selection_index]

    def _service_or_default(self) -> AnalysisService:
        if self._service is None:
            from verifyai.utils.gemini_client import get_gemini_client
            self._service = get_gemini_client()
        return self._service

    def _require_success(self, operation: str) -> AnalysisResult:
        if self.status != AnalysisStatus.SUCCESS or self.result is None:
            raise InvalidStateError(f"Cannot {operation} while session is {self.status.value}")
        return self.result

    def _clear_outcome(self) -> None:
        self.result = None
        self.selection_index = None
        self.error = None
        self.reconstruction_verified = None
        self.verified_sources = []

    # ---- Analysis ----

    def begin_analysis(self, text: str) -> AnalysisRequest:
        """Check preconditions and move to ANALYZING. Rejections leave the session untouched."""
        if self.status == AnalysisStatus.ANALYZING:
            raise SessionBusyError("An analysis is already running for this session")
        if self._in_flight:
            raise SessionBusyError("The previous analysis is still finishing for this session")
        if len((text or "").strip()) < MIN_INPUT_CHARS:
            raise InputTooShortError(MIN_INPUT_CHARS)

        request = compose_request(text)
        self._clear_outcome()
        self.input_text = text
        self.truncated = request.truncated
        self.status = AnalysisStatus.ANALYZING
        self._active_request = request
        logger.info(f"🔍 Session {self.id}: analysis started ({len(text)} chars)")
        return request

    async def complete_analysis(self, request: AnalysisRequest) -> None:
        if request is not self._active_request:
            logger.info(f"Session {self.id}: skipping superseded analysis request")
            return

        self._in_flight = True
        try:
            response = await self._service_or_default().analyze(request)
            result = parse_analysis_response(response.rawText)
            report = enforce_reconstruction(result, request.documentText, strict=self.strict_reconstruction)
            reconcile_sources(result, response.groundingReferences)
        except AnalysisError as e:
            self._fail(request, e)
            return
        except Exception as e:
            logger.error(f"❌ Session {self.id}: unexpected pipeline failure: {e}", exc_info=True)
            self._fail(request, MalformedResponse(str(e)))
            return
        finally:
            self._in_flight = False

        if request is not self._active_request:
            logger.info(f"Session {self.id}: discarding result of superseded analysis")
            return

        self._active_request = None
        self.result = result
        self.reconstruction_verified = report.ok
        self.verified_sources = [ref.uri for ref in response.groundingReferences]
        self.status = AnalysisStatus.SUCCESS
        logger.info(
            f"✅ Session {self.id}: {len(result.segments)} segments, "
            f"plagiarism {result.plagiarismPercentage}%, grammar {result.grammarScore}"
        )

    async def start_analysis(self, text: str) -> None:
        request = self.begin_analysis(text)
        await self.complete_analysis(request)

    def _fail(self, request: AnalysisRequest, error: AnalysisError) -> None:
        if request is not self._active_request:
            logger.info(f"Session {self.id}: ignoring failure of superseded analysis")
            return
        self._active_request = None
        self.result = None
        self.error = ErrorInfo(code=error.code, message=error.public_message())
        self.status = AnalysisStatus.ERROR
        logger.warning(f"Session {self.id}: analysis failed [{error.code}] {error.detail}")

    # ---- Input ----

    def set_input(self, text: str) -> None:
        if self.status == AnalysisStatus.ANALYZING:
            raise SessionBusyError("Cannot replace input while an analysis is running")
        self.input_text = text

    # ---- Selection ----

    def select_segment(self, segment_index: int) -> Segment:
        result = self._require_success("select a segment")
        if not 0 <= segment_index < len(result.segments):
            raise SelectionError(f"No segment at index {segment_index}")
        segment = result.segments[segment_index]
        if not segment.is_flagged:
            raise SelectionError(f"Segment {segment_index} is not flagged")
        self.selection_index = segment_index
        return segment

    def clear_selection(self) -> None:
        self._require_success("clear the selection")
        self.selection_index = None

    # ---- Corrections ----

    def apply_suggestion(self, segment_index: int, choice_index: int = 0) -> Segment:
        result = self._require_success("apply a suggestion")
        if not 0 <= segment_index < len(result.segments):
            raise SelectionError(f"No segment at index {segment_index}")
        segment = result.segments[segment_index]
        if not 0 <= choice_index < len(segment.suggestions):
            raise SelectionError(
                f"Segment {segment_index} has no suggestion #{choice_index} "
                f"({len(segment.suggestions)} available)"
            )

        updated = score_recomputer.apply_suggestion(result, segment_index, segment.suggestions[choice_index])
        self.selection_index = None
        return updated

    def apply_all_suggestions(self) -> int:
        result = self._require_success("apply suggestions")
        changed = score_recomputer.apply_all_suggestions(result)
        self.selection_index = None
        return changed

    # ---- Lifecycle ----

    def reset(self) -> None:
        self._clear_outcome()
        self.input_text = ""
        self.truncated = False
        self.status = AnalysisStatus.IDLE
        self._active_request = None
        logger.info(f"Session {self.id}: reset")

    def snapshot(self) -> SessionState:
        return SessionState(
            id=self.id,
            status=self.status,
            inputText=self.input_text,
            truncated=self.truncated,
            result=self.result.model_copy(deep=True) if self.result else None,
            selectionIndex=self.selection_index,
            selection=self.selection.model_copy(deep=True) if self.selection else None,
            error=self.error,
            reconstructionVerified=self.reconstruction_verified,
            verifiedSources=list(self.verified_sources),
        )
