"""
Cowsay rendering.

Animals are Perl-style ``.cow`` templates shipped in ``saypi/cows``.
"""

from __future__ import annotations

import os
import re
import textwrap
from typing import Optional

import saypi.config as config

COWS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "cows")
DEFAULT_ANIMAL = "default"

_COMMENT_RE = re.compile(r"##.*\n")
_TEMPLATE_MARKERS = (
    ('$the_cow = <<"EOC";\n', ""),
    ("$the_cow = <<EOC;\n", ""),
    ("EOC\n", ""),
    ("\\\\", "\\"),
    ("\\@", "@"),
)


class Cow:
    def __init__(self, template: str, max_width: int = config.BALLOON_WIDTH):
        self.template = _prepare_template(template)
        self.max_width = max_width

    def say(self, text: str, eyes: str = "", tongue: str = "", think: bool = False) -> str:
        eyes = eyes or "oo"
        tongue = tongue or "  "
        if len(eyes) != 2:
            raise ValueError("Eye string must be exactly two characters or empty")
        if len(tongue) != 2:
            raise ValueError("Tongue string must be exactly two characters or empty")
        return balloon_text(text, think, self.max_width) + "\n" + self.cow_text(eyes, tongue, think)

    def cow_text(self, eyes: str, tongue: str, think: bool) -> str:
        output = self.template
        output = output.replace("$eyes", eyes)
        output = output.replace("$tongue", tongue)
        output = output.replace("$thoughts", "o" if think else "\\")
        return output


def _prepare_template(template: str) -> str:
    output = _COMMENT_RE.sub("", template)
    for before, after in _TEMPLATE_MARKERS:
        output = output.replace(before, after)
    return output


def _wrap(text: str, width: int) -> list[str]:
    lines: list[str] = []
    for paragraph in text.split("\n"):
        wrapped = textwrap.wrap(
            paragraph,
            width=width,
            break_long_words=False,
            break_on_hyphens=False,
        )
        lines.extend(wrapped or [""])
    return lines


def balloon_text(text: str, think: bool, max_width: int) -> str:
    if think:
        first = middle = last = only = ("(", ")")
    else:
        first, middle, last, only = ("/", "\\"), ("|", "|"), ("\\", "/"), ("<", ">")

    lines = _wrap(text, max_width)
    width = max(len(line) for line in lines)

    upper = " " + "_" * (width + 2) + " "
    lower = " " + "-" * (width + 2) + " "

    if len(lines) == 1:
        return f"{upper}\n{only[0]} {lines[0]} {only[1]}\n{lower}"

    body = []
    for index, line in enumerate(lines):
        padded = line.ljust(width)
        if index == 0:
            left, right = first
        elif index == len(lines) - 1:
            left, right = last
        else:
            left, right = middle
        body.append(f"{left} {padded} {right}")
    return "\n".join([upper, *body, lower])


def load_cows(directory: str = COWS_DIR) -> dict[str, Cow]:
    cows = {}
    for filename in sorted(os.listdir(directory)):
        if not filename.endswith(".cow"):
            continue
        with open(os.path.join(directory, filename), encoding="utf-8") as handle:
            cows[filename[: -len(".cow")]] = Cow(handle.read())
    if DEFAULT_ANIMAL not in cows:
        raise RuntimeError(f"{DEFAULT_ANIMAL}.cow is missing from {directory}")
    config.logger.info("cows_loaded", extra={"count": len(cows)})
    return cows


class Renderer:
    def __init__(self, cows: Optional[dict[str, Cow]] = None):
        self.cows = cows if cows is not None else load_cows()

    def animals(self) -> list[str]:
        return sorted(self.cows)

    def has_animal(self, name: str) -> bool:
        return name in self.cows

    def render(self, animal: str, text: str, eyes: str, tongue: str, think: bool) -> str:
        cow = self.cows.get(animal)
        if cow is None:
            raise ValueError(f"Unknown animal {animal!r}")
        return cow.say(text, eyes, tongue, think)
