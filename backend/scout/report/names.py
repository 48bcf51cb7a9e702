"""Render lobby names that carry Hearts of Iron colour codes.

Hosts colour their lobby names with `§X` codes, where `X` picks a colour
and `§!` restores the default. Codes are turned into rich styles; unknown
codes are dropped without styling.
"""

import re

from rich.text import Text

MAX_NAME_LENGTH = 50
ELLIPSIS = "..."

_COLOR_CODE = re.compile("§(.)")
_RESET = "!"

HOI_COLORS = {
    "C": "cyan",
    "L": "plum2",
    "W": "white",
    "B": "blue",
    "G": "green",
    "R": "red",
    "b": "black",
    "g": "grey62",
    "Y": "yellow",
    "H": "gold1",
    "T": "bright_white",
    "O": "dark_orange",
    "0": "magenta",
    "1": "medium_purple",
    "2": "slate_blue1",
    "3": "deep_sky_blue1",
    "4": "turquoise2",
    "5": "spring_green2",
    "6": "chartreuse3",
    "7": "gold3",
    "8": "orange3",
    "9": "red3",
}


def parse_colored_name(name: str) -> Text:
    """Convert colour codes into styled spans; the codes themselves are removed."""
    text = Text()
    style: str | None = None
    position = 0
    for match in _COLOR_CODE.finditer(name):
        text.append(name[position : match.start()], style=style)
        code = match.group(1)
        style = None if code == _RESET else HOI_COLORS.get(code)
        position = match.end()
    text.append(name[position:], style=style)
    return text


def format_lobby_name(name: str, *, max_length: int = MAX_NAME_LENGTH) -> Text:
    """Colourise a lobby name and cut it to `max_length` visible characters."""
    text = parse_colored_name(name)
    if len(text) > max_length:
        text.right_crop(len(text) - (max_length - len(ELLIPSIS)))
        text.append(ELLIPSIS)
    return text
