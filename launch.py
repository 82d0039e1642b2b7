import logging
from datetime import datetime
from typing import Optional

import build_info
import expiration_gate
import messages
from acceptance_store import AcceptanceStore
from config import Settings
from eula_verifier import EulaVerifier
from models import (
    EulaDecision,
    ExpirationStatus,
    GateDecision,
    LaunchDecision,
    LaunchResult,
    ProjectIdentity,
)
from prompts import HostPrompt

logger = logging.getLogger(__name__)


def run_startup_checks(
    identity: ProjectIdentity,
    config: Settings,
    prompt: HostPrompt,
    secret: str = build_info.SECRET_KEY,
    expiration_raw: Optional[str] = build_info.EXPIRATION_DATE,
    now: Optional[datetime] = None,
    store: Optional[AcceptanceStore] = None,
) -> LaunchResult:
    """
    Run every gate the host must pass before starting its workflow.

    Order: EULA acceptance, build expiration, usage terms. Any rejection
    returns a decision other than PROCEED; no exception escapes.
    """
    try:
        return _run(identity, config, prompt, secret, expiration_raw, now or datetime.now(), store)
    except Exception as e:
        logger.exception("Startup checks failed for %s", identity.config_key)
        message = f"An error occurred: {e}"
        try:
            prompt.notify(messages.ERROR_TITLE, message)
        except Exception:
            logger.exception("Could not report startup failure to the user")
        return LaunchResult(decision=LaunchDecision.ERROR, message=message)


def _run(
    identity: ProjectIdentity,
    config: Settings,
    prompt: HostPrompt,
    secret: str,
    expiration_raw: Optional[str],
    now: datetime,
    store: Optional[AcceptanceStore],
) -> LaunchResult:
    verifier = EulaVerifier(identity, config, secret=secret, store=store)

    # EULA
    if verifier.is_eula_accepted():
        eula = EulaDecision(state=verifier.state)
    else:
        prompt.notify(messages.EULA_REQUIRED_TITLE, messages.EULA_REQUIRED)
        eula = verifier.run(prompt)
        if not eula.accepted:
            prompt.notify(messages.EULA_REJECTED_TITLE, messages.EULA_REJECTED)
            return LaunchResult(
                decision=LaunchDecision.EULA_REJECTED,
                message=messages.EULA_REJECTED,
                eula=eula,
            )

    # Expiration
    policy = expiration_gate.load_policy(expiration_raw, config.app_dir(), config.OVERRIDE_MARKER)
    gate = expiration_gate.check(policy, now, block_on_invalid=config.BLOCK_ON_INVALID_EXPIRATION)
    if gate == GateDecision.BLOCKED:
        if policy.status == ExpirationStatus.VALID:
            decision = LaunchDecision.EXPIRED
            message = messages.expired(config.RELEASES_URL)
        else:
            decision = LaunchDecision.EXPIRATION_INVALID
            message = messages.invalid_expiration(config.RELEASES_URL)
        prompt.notify(messages.EXPIRED_TITLE, message)
        return LaunchResult(
            decision=decision,
            message=message,
            expiration_date=policy.expiration_date,
            eula=eula,
            details={"expiration_status": policy.status.value},
        )

    store_settings = verifier.store.settings
    if not store_settings.eula_agreed:
        store_settings.eula_agreed = True
        verifier.store.save()

    # Usage terms
    returning = store_settings.validated
    if not policy.override_present:
        terms = messages.usage_terms(identity.name, policy.expiration_date, config.RELEASES_URL, returning)
        if not prompt.confirm(messages.AGREEMENT_TITLE, terms):
            return LaunchResult(
                decision=LaunchDecision.TERMS_DECLINED,
                validated=returning,
                expiration_date=policy.expiration_date,
                eula=eula,
            )
        if not returning:
            store_settings.validated = True
            verifier.store.save()

    return LaunchResult(
        decision=LaunchDecision.PROCEED,
        validated=returning,
        expiration_date=policy.expiration_date,
        eula=eula,
        details={"override_present": policy.override_present},
    )
