from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from verifyai.schemas.analysis_schemas import AnalysisResult, Segment


class AnalysisStatus(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class ErrorInfo(BaseModel):
    code: str
    message: str


class SessionState(BaseModel):
    id: str
    status: AnalysisStatus
    inputText: str = ""
    truncated: bool = False
    result: Optional[AnalysisResult] = None
    selectionIndex: Optional[int] = None
    selection: Optional[Segment] = None
    error: Optional[ErrorInfo] = None
    reconstructionVerified: Optional[bool] = None
    verifiedSources: List[str] = Field(default_factory=list)


# ---- Request bodies ----

class AnalyzeRequest(BaseModel):
    text: str
    wait: bool = False


class SelectSegmentRequest(BaseModel):
    segmentIndex: int = Field(ge=0)


class ApplySuggestionRequest(BaseModel):
    choiceIndex: int = Field(default=0, ge=0)
