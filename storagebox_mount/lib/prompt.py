from __future__ import annotations

import getpass
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Prompter:
    """Terminal questions for interactive runs."""

    def __init__(
        self,
        *,
        input_fn: Callable[[str], str] = input,
        secret_fn: Callable[[str], str] = getpass.getpass,
    ) -> None:
        self._input = input_fn
        self._secret = secret_fn

    def ask(self, question: str, default: Optional[str] = None) -> str:
        suffix = f" [{default}]" if default not in (None, "") else ""
        answer = self._input(f"? {question}{suffix}: ").strip()
        if not answer and default is not None:
            return default
        return answer

    def secret(self, question: str) -> str:
        return self._secret(f"? {question}: ")

    def confirm(self, question: str, *, default: bool) -> bool:
        hint = "Y/n" if default else "y/N"
        answer = self._input(f"? {question} [{hint}]: ").strip().lower()
        if not answer:
            return default
        return answer in {"y", "yes"}

    def choose(self, question: str, choices: list[str]) -> str:
        for i, c in enumerate(choices, start=1):
            print(f"  {i}) {c}")
        return self._input(f"? {question} [1-{len(choices)}]: ").strip()
