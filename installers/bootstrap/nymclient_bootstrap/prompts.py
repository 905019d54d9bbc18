"""Yes/no confirmation strategies injected into the pipeline."""

from __future__ import annotations

from typing import Callable


Confirm = Callable[[str, bool], bool]


def unattended(_prompt: str, default: bool) -> bool:
    return default


def always_yes(_prompt: str, _default: bool) -> bool:
    return True


def parse_answer(answer: str, default: bool) -> bool:
    a = answer.strip().lower()
    if a in ("y", "yes"):
        return True
    if a in ("n", "no"):
        return False
    return default


def console_confirm(reader: Callable[[str], str] = input) -> Confirm:
    def _confirm(prompt: str, default: bool) -> bool:
        hint = "y" if default else "n"
        try:
            answer = reader(f"{prompt} [y/n] ({hint}): ")
        except EOFError:
            return default
        return parse_answer(answer, default)

    return _confirm


def make_confirm(interactive: bool, assume_yes: bool = False) -> Confirm:
    if assume_yes:
        return always_yes
    if not interactive:
        return unattended
    return console_confirm()
