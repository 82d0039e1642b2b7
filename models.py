from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field


class CodeFormat(str, Enum):
    SHORT = "short"
    PREFIXED = "prefixed"


class CompatibilityPolicy(str, Enum):
    MAJOR = "major"
    MAJOR_MINOR = "major_minor"


class LoadStatus(str, Enum):
    LOADED = "loaded"
    MIGRATED = "migrated"
    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    IO_ERROR = "io_error"


class ExpirationStatus(str, Enum):
    VALID = "valid"
    MISSING = "missing"
    MALFORMED = "malformed"


class GateDecision(str, Enum):
    ALLOWED = "allowed"
    BLOCKED = "blocked"


class VerificationState(str, Enum):
    START = "start"
    PROMPT_REQUIRED = "prompt_required"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PersistenceTarget(str, Enum):
    STORE = "store"
    FALLBACK = "fallback"
    NONE = "none"


class LaunchDecision(str, Enum):
    PROCEED = "proceed"
    EULA_REJECTED = "eula_rejected"
    EXPIRED = "expired"
    EXPIRATION_INVALID = "expiration_invalid"
    TERMS_DECLINED = "terms_declined"
    ERROR = "error"


class ProjectIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    version: str = Field(min_length=1)

    @property
    def config_key(self) -> str:
        return f"{self.name}-{self.version}"


class AccessCodeRecord(BaseModel):
    key: str
    code: str


class StoreSettings(BaseModel):
    # Unknown settings written by newer builds are kept as extras
    model_config = ConfigDict(extra="allow")

    validated: bool = False
    eula_agreed: bool = False


class StoreDocument(BaseModel):
    """On-disk shape of the acceptance store (schema version 2)."""

    model_config = ConfigDict(extra="allow")

    schema_version: int = 2
    accepted_eulas: Dict[str, str] = Field(default_factory=dict)
    settings: StoreSettings = Field(default_factory=StoreSettings)


class ExpirationPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    expiration_date: Optional[datetime] = None
    status: ExpirationStatus = ExpirationStatus.MISSING
    override_present: bool = False


class PromptRequest(BaseModel):
    project_name: str
    project_version: str
    eula_url: str
    attempt: int = 1
    previous_invalid: bool = False
    message: Optional[str] = None


class PromptResponse(BaseModel):
    code: Optional[str] = None
    cancelled: bool = False

    @classmethod
    def submit(cls, code: str) -> "PromptResponse":
        return cls(code=code)

    @classmethod
    def cancel(cls) -> "PromptResponse":
        return cls(cancelled=True)


class VerificationOutcome(BaseModel):
    state: VerificationState
    invalid_code: bool = False
    persisted_to: PersistenceTarget = PersistenceTarget.NONE
    message: Optional[str] = None


class EulaDecision(BaseModel):
    state: VerificationState
    attempts: int = 0
    prompted: bool = False
    persisted_to: PersistenceTarget = PersistenceTarget.NONE

    @property
    def accepted(self) -> bool:
        return self.state == VerificationState.ACCEPTED


class LaunchResult(BaseModel):
    decision: LaunchDecision
    message: Optional[str] = None
    validated: bool = False
    expiration_date: Optional[datetime] = None
    eula: Optional[EulaDecision] = None
    details: Dict[str, Any] = Field(default_factory=dict)

    @property
    def proceed(self) -> bool:
        return self.decision == LaunchDecision.PROCEED
