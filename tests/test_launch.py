"""Tests for the startup gate sequence."""
from datetime import datetime

import pytest

from acceptance_store import AcceptanceStore
from code_derivation import derive
from conftest import SECRET, ScriptedPrompt
from launch import run_startup_checks
from models import LaunchDecision, PersistenceTarget

NOW = datetime(2025, 6, 1)
FUTURE = "12/31/2026"
PAST = "1/1/2020"


@pytest.fixture
def valid_code(identity):
    return derive(identity.name, identity.version, SECRET)


@pytest.fixture
def accepted(store, identity, valid_code):
    store.set(identity.config_key, valid_code)
    store.save()
    return store


def run(identity, config, prompt, expiration=FUTURE):
    return run_startup_checks(identity, config, prompt, secret=SECRET, expiration_raw=expiration, now=NOW)


class TestEulaGate:
    def test_first_run_prompts_and_proceeds(self, identity, config, valid_code):
        prompt = ScriptedPrompt([valid_code])
        result = run(identity, config, prompt)

        assert result.decision == LaunchDecision.PROCEED
        assert result.proceed
        assert result.eula.prompted
        assert result.eula.persisted_to == PersistenceTarget.STORE
        assert prompt.notifications[0][0] == "EULA Acceptance Required"

    def test_cancel_stops_workflow(self, identity, config):
        prompt = ScriptedPrompt([None])
        result = run(identity, config, prompt)

        assert result.decision == LaunchDecision.EULA_REJECTED
        assert not result.proceed
        assert prompt.notifications[-1][0] == "EULA Not Accepted"
        assert prompt.confirmations == []

    def test_already_accepted_skips_prompt(self, identity, config, accepted):
        prompt = ScriptedPrompt()
        result = run(identity, config, prompt)

        assert result.proceed
        assert prompt.requests == []
        assert not result.eula.prompted


class TestExpirationGate:
    def test_expired_build_blocked(self, identity, config, accepted):
        prompt = ScriptedPrompt()
        result = run(identity, config, prompt, expiration=PAST)

        assert result.decision == LaunchDecision.EXPIRED
        assert config.RELEASES_URL in result.message
        assert result.expiration_date == datetime(2020, 1, 1)
        assert prompt.confirmations == []

    def test_override_marker_allows_expired_build(self, identity, config, accepted):
        (config.app_dir() / "NOEXPIRE").write_text("")
        prompt = ScriptedPrompt()
        result = run(identity, config, prompt, expiration=PAST)

        assert result.proceed
        assert result.details["override_present"] is True
        # usage terms are not shown when the override is present
        assert prompt.confirmations == []

    def test_malformed_expiration_blocked(self, identity, config, accepted):
        result = run(identity, config, ScriptedPrompt(), expiration="not a date")
        assert result.decision == LaunchDecision.EXPIRATION_INVALID
        assert result.details["expiration_status"] == "malformed"

    def test_missing_expiration_allowed_when_configured(self, identity, config, accepted):
        config = config.model_copy(update={"BLOCK_ON_INVALID_EXPIRATION": False})
        result = run(identity, config, ScriptedPrompt(), expiration=None)
        assert result.proceed

    def test_eula_checked_before_expiration(self, identity, config):
        prompt = ScriptedPrompt([None])
        result = run(identity, config, prompt, expiration=PAST)
        assert result.decision == LaunchDecision.EULA_REJECTED


class TestUsageTerms:
    def test_first_time_message_then_returning(self, identity, config, accepted):
        prompt = ScriptedPrompt()
        first = run(identity, config, prompt)
        second = run(identity, config, prompt)

        assert not first.validated
        assert second.validated
        first_text = prompt.confirmations[0][1]
        second_text = prompt.confirmations[1][1]
        assert "research only tool" in first_text
        assert "research only tool" not in second_text
        assert "12/31/2026" in second_text

    def test_decline_stops_workflow(self, identity, config, accepted):
        prompt = ScriptedPrompt(confirm=False)
        result = run(identity, config, prompt)

        assert result.decision == LaunchDecision.TERMS_DECLINED
        assert not AcceptanceStore.load(identity.name, config).settings.validated

    def test_eula_agreed_recorded(self, identity, config, accepted):
        run(identity, config, ScriptedPrompt())
        reloaded = AcceptanceStore.load(identity.name, config)
        assert reloaded.settings.eula_agreed
        assert reloaded.settings.validated


class TestFailures:
    def test_prompt_error_reported_not_raised(self, identity, config):
        class BrokenPrompt(ScriptedPrompt):
            def request_code(self, request):
                raise RuntimeError("window closed")

        prompt = BrokenPrompt()
        result = run(identity, config, prompt)

        assert result.decision == LaunchDecision.ERROR
        assert "window closed" in result.message
        assert prompt.notifications[-1][0] == "Error"
