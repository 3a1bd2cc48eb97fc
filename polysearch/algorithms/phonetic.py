"""Phonetic (sounds-alike) matching with Soundex and Metaphone codes."""

import string
from collections.abc import Mapping, Sequence
from typing import Any

from .base import MatchAlgorithm, RawMatch, iter_field_texts, normalize

_LETTERS = set(string.ascii_uppercase)
_VOWELS = set("AEIOU")
_SOFTENERS = set("EIY")
_AFFECT_H = set("CGPST")
_NO_GH_TO_F = set("BDH")

_SOUNDEX_TABLE = dict(zip(string.ascii_uppercase, "01230120022455012623010202"))


def soundex(text: str) -> str:
    """Four character Soundex code, or an empty string when there are no letters."""
    code = ""
    last = None

    for char in text.upper():
        if char not in _LETTERS:
            continue
        digit = _SOUNDEX_TABLE[char]
        if not code:
            code = char
            last = digit
        elif digit != last:
            if digit != "0":
                code += digit
            last = digit
        if len(code) == 4:
            break

    if not code:
        return ""
    return code.ljust(4, "0")


def metaphone(text: str) -> str:
    """Traditional Metaphone code without a length limit."""
    word = text.upper()
    length = len(word)

    def at(i: int) -> str:
        return word[i] if 0 <= i < length else ""

    out: list[str] = []
    i = 0
    while i < length and word[i] not in _LETTERS:
        i += 1
    if i >= length:
        return ""

    # Initial letter exceptions
    first, second = at(i), at(i + 1)
    if first == "A":
        if second == "E":
            out.append("E")
            i += 2
        else:
            out.append("A")
            i += 1
    elif first in "GKP" and second == "N":
        out.append("N")
        i += 2
    elif first == "W":
        if second == "R":
            out.append("R")
            i += 2
        elif second == "H" or second in _VOWELS and second:
            out.append("W")
            i += 2
    elif first == "X":
        out.append("S")
        i += 1
    elif first in "EIOU":
        out.append(first)
        i += 1

    while i < length:
        current = word[i]
        skip = 0

        if current not in _LETTERS or (current == at(i - 1) and current != "C"):
            i += 1
            continue

        nxt, after = at(i + 1), at(i + 2)
        prev = at(i - 1)

        if current == "B":
            if not (prev == "M" and i == length - 1):
                out.append("B")
        elif current == "C":
            if nxt and nxt in _SOFTENERS:
                if nxt == "I" and after == "A":
                    out.append("X")
                elif prev != "S":
                    out.append("S")
            elif nxt == "H":
                out.append("X")
                skip = 1
            else:
                out.append("K")
        elif current == "D":
            if nxt == "G" and after and after in _SOFTENERS:
                out.append("J")
                skip = 1
            else:
                out.append("T")
        elif current == "G":
            if nxt == "H":
                if not (at(i - 3) in _NO_GH_TO_F and at(i - 3) or at(i - 4) == "H"):
                    out.append("F")
                    skip = 1
            elif nxt == "N":
                if not (after not in _LETTERS or (after == "E" and at(i + 3) == "D")):
                    out.append("K")
            elif nxt and nxt in _SOFTENERS and prev != "G":
                out.append("J")
            else:
                out.append("K")
        elif current == "H":
            if nxt and nxt in _VOWELS and prev not in _AFFECT_H:
                out.append("H")
        elif current == "K":
            if prev != "C":
                out.append("K")
        elif current == "P":
            out.append("F" if nxt == "H" else "P")
        elif current == "Q":
            out.append("K")
        elif current == "S":
            if nxt == "I" and after in ("O", "A"):
                out.append("X")
            elif nxt == "H":
                out.append("X")
                skip = 1
            else:
                out.append("S")
        elif current == "T":
            if nxt == "I" and after in ("O", "A"):
                out.append("X")
            elif nxt == "H":
                out.append("0")
                skip = 1
            elif not (nxt == "C" and after == "H"):
                out.append("T")
        elif current == "V":
            out.append("F")
        elif current == "W":
            if nxt and nxt in _VOWELS:
                out.append("W")
        elif current == "X":
            out.append("KS")
        elif current == "Y":
            if nxt and nxt in _VOWELS:
                out.append("Y")
        elif current == "Z":
            out.append("S")
        elif current in "FJLMNR":
            out.append(current)

        i += 1 + skip

    return "".join(out)


ENCODERS = {"soundex": soundex, "metaphone": metaphone}


def phonetic_code(text: str, algorithm: str = "metaphone") -> str:
    """Encode text with the named algorithm; unknown names use Metaphone."""
    text = text.strip()
    if not text:
        return ""
    return ENCODERS.get(algorithm, metaphone)(text)


class PhoneticMatcher(MatchAlgorithm):
    """Matches values (or single words) that sound like the query."""

    name = "phonetic"

    def search(
        self,
        query: str,
        records: Sequence[Any],
        fields: Sequence[str],
        options: Mapping[str, Any] | None = None,
    ) -> list[RawMatch]:
        algorithm = self.option(options, "algorithm")
        query_code = phonetic_code(normalize(query), algorithm)
        if not query_code:
            return []

        matches = []
        for index, record in enumerate(records):
            matched = []
            for field_name, text in iter_field_texts(record, fields):
                value = normalize(text)
                if phonetic_code(value, algorithm) == query_code or any(
                    phonetic_code(word, algorithm) == query_code
                    for word in value.split(" ")
                    if len(word) >= 2
                ):
                    matched.append(field_name)

            if matched:
                matches.append(
                    RawMatch(
                        index,
                        30,
                        matched,
                        {
                            "match_type": self.name,
                            "algorithm": algorithm,
                            "query_code": query_code,
                        },
                    )
                )

        return matches
