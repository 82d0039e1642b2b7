import logging
from typing import Optional

import build_info
import messages
from acceptance_store import AcceptanceStore
from code_derivation import derive, verify_code
from config import Settings
from models import (
    CodeFormat,
    CompatibilityPolicy,
    EulaDecision,
    PersistenceTarget,
    ProjectIdentity,
    PromptRequest,
    VerificationOutcome,
    VerificationState,
)
from prompts import CodePrompt
from version_compat import VersionCompatibilityResolver

logger = logging.getLogger(__name__)


class EulaVerifier:
    def __init__(
        self,
        identity: ProjectIdentity,
        config: Settings,
        secret: str = build_info.SECRET_KEY,
        store: Optional[AcceptanceStore] = None,
    ):
        self.identity = identity
        self.config = config
        self.secret = secret
        self.code_format = CodeFormat(config.CODE_FORMAT)
        self.store = store if store is not None else AcceptanceStore.load(identity.name, config)
        self.resolver = VersionCompatibilityResolver(
            secret,
            policy=CompatibilityPolicy(config.COMPATIBILITY_POLICY),
            code_format=self.code_format,
            reverify_compatible=config.REVERIFY_COMPATIBLE_CODES,
        )
        self.state = VerificationState.START

    @property
    def config_key(self) -> str:
        return self.identity.config_key

    def is_eula_accepted(self) -> bool:
        """
        Check whether this version is covered by a stored acceptance.

        Moves the verifier to ACCEPTED or PROMPT_REQUIRED.
        """
        authorized = self.resolver.is_authorized(self.store, self.identity.name, self.identity.version)
        self.state = VerificationState.ACCEPTED if authorized else VerificationState.PROMPT_REQUIRED
        return authorized

    def expected_code(self) -> str:
        return derive(self.identity.name, self.identity.version, self.secret, self.code_format)

    def submit_code(self, code: str) -> VerificationOutcome:
        """
        Verify a user-entered code.

        An invalid code leaves the store untouched and keeps the verifier in
        PROMPT_REQUIRED. A valid one is written through to disk, falling back
        to the flat record file when the structured store cannot be saved.
        """
        if not verify_code(code or "", self.identity.name, self.identity.version, self.secret, self.code_format):
            logger.info("Rejected access code for %s", self.config_key)
            self.state = VerificationState.PROMPT_REQUIRED
            return VerificationOutcome(
                state=self.state,
                invalid_code=True,
                message=messages.INVALID_CODE,
            )

        persisted_to = self._persist(code.strip())
        self.state = VerificationState.ACCEPTED
        logger.info("Accepted access code for %s (persisted to %s)", self.config_key, persisted_to.value)
        return VerificationOutcome(state=self.state, persisted_to=persisted_to)

    def cancel(self) -> VerificationOutcome:
        self.state = VerificationState.REJECTED
        return VerificationOutcome(state=self.state, message=messages.EULA_REJECTED)

    def _persist(self, code: str) -> PersistenceTarget:
        self.store.set(self.config_key, code)
        if self.store.save():
            return PersistenceTarget.STORE

        if self.store.write_fallback(self.config_key, code):
            return PersistenceTarget.FALLBACK

        logger.warning("Acceptance for %s only holds for this session", self.config_key)
        return PersistenceTarget.NONE

    def run(self, prompt: CodePrompt) -> EulaDecision:
        """
        Check for a stored acceptance and prompt until accepted or cancelled.

        There is no attempt limit; each retry needs a new user action.
        """
        if self.is_eula_accepted():
            return EulaDecision(state=self.state)

        attempts = 0
        previous_invalid = False
        while True:
            attempts += 1
            request = PromptRequest(
                project_name=self.identity.name,
                project_version=self.identity.version,
                eula_url=self.config.EULA_URL,
                attempt=attempts,
                previous_invalid=previous_invalid,
                message=messages.INVALID_CODE if previous_invalid else None,
            )
            response = prompt.request_code(request)

            if response.cancelled or response.code is None:
                self.cancel()
                return EulaDecision(state=self.state, attempts=attempts, prompted=True)

            outcome = self.submit_code(response.code)
            if outcome.state == VerificationState.ACCEPTED:
                return EulaDecision(
                    state=self.state,
                    attempts=attempts,
                    prompted=True,
                    persisted_to=outcome.persisted_to,
                )

            previous_invalid = True
