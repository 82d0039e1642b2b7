from abc import ABC, abstractmethod
from typing import Callable, Optional

import messages
from models import PromptRequest, PromptResponse


class CodePrompt(ABC):
    """Interactive capability that asks the user for an access code."""

    @abstractmethod
    def request_code(self, request: PromptRequest) -> PromptResponse:
        """Return the submitted code, or PromptResponse.cancel()."""


class HostPrompt(CodePrompt):
    """Everything the startup gates need from the host's user interface."""

    @abstractmethod
    def notify(self, title: str, message: str) -> None:
        """Show an informational message."""

    @abstractmethod
    def confirm(self, title: str, message: str) -> bool:
        """Ask a yes/no question; True means yes."""


class ConsolePrompt(HostPrompt):
    """Terminal implementation backed by input()/print()."""

    def __init__(
        self,
        input_func: Optional[Callable[[str], str]] = None,
        output_func: Optional[Callable[[str], None]] = None,
    ):
        self._input = input_func or (lambda text: input(text))
        self._print = output_func or print

    def _ask(self, text: str) -> Optional[str]:
        try:
            return self._input(text)
        except (EOFError, KeyboardInterrupt):
            return None

    def request_code(self, request: PromptRequest) -> PromptResponse:
        if request.previous_invalid:
            self._print(f"  {messages.INVALID_CODE}")
        if request.attempt == 1:
            self._print(f"\n  {messages.code_instructions(request.eula_url)}")

        value = self._ask("  Enter your access code (blank to cancel): ")
        if value is None or not value.strip():
            return PromptResponse.cancel()
        return PromptResponse.submit(value.strip())

    def notify(self, title: str, message: str) -> None:
        self._print(f"\n{'=' * 60}\n  {title}\n{'=' * 60}\n{message}")

    def confirm(self, title: str, message: str) -> bool:
        self.notify(title, message)
        while True:
            value = self._ask("  Continue? [y/N]: ")
            if value is None:
                return False
            value = value.strip().lower()
            if not value or value in ("n", "no"):
                return False
            if value in ("y", "yes"):
                return True
            self._print("    Please enter 'y' or 'n'.")
