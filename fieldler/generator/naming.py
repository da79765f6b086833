# fieldler/fieldler/generator/naming.py
from __future__ import annotations

SEPARATION = "_"

_FIRST_LETTER = "first_letter"
_LOWER_CASE = "lower_case"
_UPPER_CASE = "upper_case"


def snake_case(name: str) -> str:
    """
    Turn a field name into an upper-case, underscore separated constant name.

      - a separator goes before a capital that follows a lower-case letter or a digit
        ("aField" -> "A_FIELD").
      - inside a run of capitals, a separator goes only before the capital that starts
        a new word, i.e. one followed by a lower-case letter
        ("someDTOCrazy" -> "SOME_DTO_CRAZY", "FIeld" -> "F_IELD").
    """
    state = _FIRST_LETTER
    out = []
    length = len(name)

    for i, ch in enumerate(name):
        if state == _FIRST_LETTER:
            out.append(ch.upper())
            state = _UPPER_CASE if ch.isupper() else _LOWER_CASE
        elif state == _UPPER_CASE:
            if ch.isupper():
                if i + 1 < length and name[i + 1].islower():
                    out.append(SEPARATION)
            else:
                state = _LOWER_CASE
            out.append(ch.upper())
        else:
            if ch.isupper():
                out.append(SEPARATION)
                state = _UPPER_CASE
            out.append(ch.upper())

    return "".join(out)
