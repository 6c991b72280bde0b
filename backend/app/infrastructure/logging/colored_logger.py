"""ANSI-coloured trace of the client save sequence.

One colour per persistence stage, so a single submit can be followed in the
terminal from the client insert to the last member write:

    CLIENT     green       base record insert / update
    PROFILE    yellow      profile image upload
    DOCUMENTS  blue        pending document uploads
    CONTACTS   magenta     contact replacement
    MEMBERS    cyan        member document uploads and reconcile
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NamedTuple

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_RED = "\033[91m"
_GREEN = "\033[92m"
_YELLOW = "\033[93m"
_BLUE = "\033[94m"
_MAGENTA = "\033[95m"
_CYAN = "\033[96m"
_GRAY = "\033[90m"


class Stage(NamedTuple):
    label: str
    color: str


class SaveStage:
    CLIENT = Stage("CLIENT", _GREEN)
    PROFILE = Stage("PROFILE", _YELLOW)
    DOCUMENTS = Stage("DOCUMENTS", _BLUE)
    CONTACTS = Stage("CONTACTS", _MAGENTA)
    MEMBERS = Stage("MEMBERS", _CYAN)
    COMPLETE = Stage("COMPLETE", _GREEN)


class SaveStepLogger:
    """Logs save steps with stage colours and elapsed time.

        slog = SaveStepLogger("ClientSaveCoordinator")
        with slog.timed_step(SaveStage.CLIENT, "Inserting client", name="Acme Ltd"):
            client = await repository.create(client)
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    def step_start(self, stage: Stage, message: str, **details: Any) -> None:
        self._logger.info(
            "%s%s[%s]%s %s%s%s",
            stage.color, _BOLD, stage.label, _RESET, message, _RESET, _details(details),
        )

    def step_complete(self, stage: Stage, message: str, **details: Any) -> None:
        self._logger.info(
            "%s[%s]%s %s✓ %s%s%s",
            stage.color, stage.label, _RESET, _GREEN, message, _RESET, _details(details),
        )

    def step_error(self, stage: Stage, message: str, error: BaseException) -> None:
        self._logger.error(
            "%s%s[%s] %s%s %s→ %s: %s%s",
            _RED, _BOLD, stage.label, message, _RESET, _DIM, type(error).__name__, error, _RESET,
        )

    def detail(self, message: str, **details: Any) -> None:
        self._logger.info("   %s├─ %s%s%s", _GRAY, message, _RESET, _details(details, _DIM))

    def separator(self, title: str) -> None:
        self._logger.info("%s──── %s %s%s", _GRAY, title, "─" * max(0, 50 - len(title)), _RESET)

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **details: Any) -> Iterator[None]:
        """Log start and finish of one step; a failure is logged and re-raised."""
        self.step_start(stage, message, **details)
        started = time.perf_counter()
        try:
            yield
        except Exception as exc:
            self.step_error(stage, f"{message} failed after {time.perf_counter() - started:.2f}s", exc)
            raise
        self.step_complete(stage, f"{message} ({time.perf_counter() - started:.2f}s)")


def _details(details: dict[str, Any], color: str = _GRAY) -> str:
    if not details:
        return ""
    return f" {color}({' | '.join(f'{k}={v}' for k, v in details.items())}){_RESET}"
