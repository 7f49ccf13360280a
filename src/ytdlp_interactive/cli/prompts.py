"""Thin questionary wrappers used by the interactive session.

Every prompt either returns a value or raises
:class:`~ytdlp_interactive.exceptions.UserCancelledError` (questionary
returns ``None`` on Ctrl+C / Esc).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Union

from ytdlp_interactive.exceptions import PrerequisiteMissingError, UserCancelledError


@dataclass(frozen=True, slots=True)
class MenuChoice:
    title: str
    value: Any
    description: str | None = None


@dataclass(frozen=True, slots=True)
class MenuSeparator:
    title: str


MenuItem = Union[MenuChoice, MenuSeparator]


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise PrerequisiteMissingError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _answer_or_cancel(answer: Any) -> Any:
    if answer is None:
        raise UserCancelledError("Closed by user.")
    return answer


def ask_text(message: str, default: str = "") -> str:
    questionary = _import_questionary()
    return str(_answer_or_cancel(questionary.text(message, default=default).ask()))


def ask_confirm(message: str, default: bool = True) -> bool:
    questionary = _import_questionary()
    return bool(_answer_or_cancel(questionary.confirm(message, default=default).ask()))


def ask_select(message: str, items: Sequence[MenuItem]) -> Any:
    """Arrow-key menu over *items*; separators are not selectable."""
    questionary = _import_questionary()
    choices: list[Any] = []
    for item in items:
        if isinstance(item, MenuSeparator):
            choices.append(questionary.Separator(f"── {item.title} ──"))
        else:
            choices.append(
                questionary.Choice(
                    title=item.title,
                    value=item.value,
                    description=item.description,
                )
            )
    return _answer_or_cancel(
        questionary.select(
            message,
            choices=choices,
            use_arrow_keys=True,
            use_shortcuts=False,
        ).ask()
    )
