"""Tests for the console prompt."""
from models import PromptRequest
from prompts import ConsolePrompt


def make_prompt(answers):
    answers = list(answers)
    printed = []

    def fake_input(text):
        printed.append(text)
        if not answers:
            raise EOFError
        return answers.pop(0)

    return ConsolePrompt(input_func=fake_input, output_func=printed.append), printed


def request(**kwargs):
    data = {"project_name": "Proj", "project_version": "1.0.0", "eula_url": "https://example.org/eula"}
    data.update(kwargs)
    return PromptRequest(**data)


class TestRequestCode:
    def test_submits_trimmed_code(self):
        prompt, printed = make_prompt(["  abcd1234 "])
        response = prompt.request_code(request())
        assert response.code == "abcd1234"
        assert not response.cancelled
        assert any("https://example.org/eula" in line for line in printed)

    def test_blank_cancels(self):
        prompt, _ = make_prompt([""])
        assert prompt.request_code(request()).cancelled

    def test_eof_cancels(self):
        prompt, _ = make_prompt([])
        assert prompt.request_code(request()).cancelled

    def test_previous_invalid_reported(self):
        prompt, printed = make_prompt(["x"])
        prompt.request_code(request(attempt=2, previous_invalid=True))
        assert any("Invalid access code" in line for line in printed)


class TestConfirm:
    def test_yes(self):
        prompt, _ = make_prompt(["y"])
        assert prompt.confirm("Agreement", "terms")

    def test_default_is_no(self):
        prompt, _ = make_prompt([""])
        assert not prompt.confirm("Agreement", "terms")

    def test_reasks_on_unknown_answer(self):
        prompt, printed = make_prompt(["maybe", "yes"])
        assert prompt.confirm("Agreement", "terms")
        assert any("Please enter 'y' or 'n'." in line for line in printed)

    def test_eof_declines(self):
        prompt, _ = make_prompt([])
        assert not prompt.confirm("Agreement", "terms")
