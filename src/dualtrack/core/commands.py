"""Command extraction from free-form request text."""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CommandSpec:
    """A command to hand to the runtime, already split into argv form."""

    command: str
    args: list[str] = field(default_factory=list)

    @property
    def display(self) -> str:
        return shlex.join([self.command, *self.args])

    @classmethod
    def parse(cls, raw: str) -> CommandSpec:
        words = shlex.split(raw)
        return cls(command=words[0], args=words[1:])


@dataclass(frozen=True)
class CommandRule:
    name: str
    pattern: re.Pattern[str]


# Checked in order against the lower-cased text; the whole match is the command.
COMMAND_RULES: tuple[CommandRule, ...] = (
    CommandRule("npm_test", re.compile(r"\bnpm test\b")),
    CommandRule("ls", re.compile(r"\bls\b")),
    CommandRule("node_script", re.compile(r"""\bnode\s+[^\s;&|`$'"]+""")),
    CommandRule("node", re.compile(r"\bnode\b")),
)


def extract_command(text: str) -> CommandSpec | None:
    """Pick the first command pattern found in ``text``, if any."""
    lowered = text.lower()
    for rule in COMMAND_RULES:
        found = rule.pattern.search(lowered)
        if found is not None:
            return CommandSpec.parse(found.group(0))
    return None
