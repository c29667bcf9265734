"""Codec for ICAO Field 18 and Field 19 strings.

Field 18 is a space separated list of ``CODE/value`` indicators whose values
may themselves contain spaces (``RMK/NO TRANSPONDER``), so a value runs until
the next ``CODE/`` boundary rather than the next space.

Field 19 uses a backslash after a single letter (``E\\0500 P\\002 R\\VE``) and
ends each value at the next whitespace. Its ``C\\`` code is overloaded: it is
the dinghy cover flag when it appears before the ``D\\`` token and the pilot
in command otherwise.
"""

from __future__ import annotations

import logging
import re

from fplweb.contracts.fields import MAX_PBN_ENTRIES, STAY_INFO_SLOTS, Field18Data, Field19Data
from fplweb.contracts.template import TemplateData, TemplateField19

logger = logging.getLogger(__name__)

_F18_TOKEN = re.compile(r"([A-Z0-9]+)/([^ ]+(?:\s+[^ /]+)*?)(?=\s+[A-Z0-9]+/|$)")
_F19_TOKEN = re.compile(r"([A-Z])\\(\S*)")
_PBN_CODE = re.compile(r"[A-Z]\d")
_STAY_INFO = re.compile(r"^STAYINFO(\d+)$")

# (attribute, letter) in the order letters are written
RADIO_LETTERS = (("radio_uhf", "U"), ("radio_vhf", "V"), ("radio_elba", "E"))
SURVIVAL_LETTERS = (
    ("survival_polar", "P"),
    ("survival_desert", "D"),
    ("survival_maritime", "M"),
    ("survival_jungle", "J"),
)
JACKET_LETTERS = (
    ("jackets_light", "L"),
    ("jackets_fluores", "F"),
    ("jackets_uhf", "U"),
    ("jackets_vhf", "V"),
)


# ============ Field 18 ============

def encode_field18(data: Field18Data) -> str:
    """Build the Field 18 string; absent sub-fields are left out entirely."""
    parts: list[str] = []

    if data.sts:
        parts.append(f"STS/{' '.join(data.sts)}")
    if data.pbn:
        parts.append(f"PBN/{''.join(data.pbn)}")
    if data.eur_protected:
        parts.append("EUR/PROTECTED")
    if data.per:
        parts.append(f"PER/{data.per}")
    if data.rfp:
        parts.append(f"RFP/{data.rfp}")
    for code, value in data.text_fields.items():
        if value:
            parts.append(f"{code}/{value}")
    for index, info in enumerate(data.stay_info, start=1):
        if info:
            parts.append(f"STAYINFO{index}/{info}")

    return " ".join(parts)


def decode_field18(text: str) -> Field18Data:
    """Parse a Field 18 string; unknown indicators land in ``text_fields``."""
    sts: list[str] = []
    pbn: list[str] = []
    per = ""
    rfp = ""
    eur_protected = False
    stay_info = [""] * STAY_INFO_SLOTS
    text_fields: dict[str, str] = {}

    for match in _F18_TOKEN.finditer(text.strip() if text else ""):
        code, value = match.group(1), match.group(2)

        if code == "STS":
            sts = value.split()
        elif code == "PBN":
            pbn = _PBN_CODE.findall(value)
            if len(pbn) > MAX_PBN_ENTRIES:
                logger.debug("PBN/ has %d entries, keeping the first %d", len(pbn), MAX_PBN_ENTRIES)
                pbn = pbn[:MAX_PBN_ENTRIES]
        elif code == "PER":
            per = value
        elif code == "EUR" and value == "PROTECTED":
            eur_protected = True
        elif code == "RFP":
            rfp = value
        elif (stay := _STAY_INFO.match(code)) and 1 <= int(stay.group(1)) <= STAY_INFO_SLOTS:
            stay_info[int(stay.group(1)) - 1] = value
        else:
            text_fields[code] = value

    return Field18Data(
        sts=sts,
        pbn=pbn,
        per=per,
        eur_protected=eur_protected,
        rfp=rfp,
        stay_info=stay_info,
        text_fields=text_fields,
    )


# ============ Field 19 ============

def _letters(data: object, table: tuple[tuple[str, str], ...]) -> str:
    return "".join(letter for attr, letter in table if getattr(data, attr))


def _flags(value: str, table: tuple[tuple[str, str], ...]) -> dict[str, bool]:
    return {attr: letter in value for attr, letter in table}


def radio_letters(data: Field19Data) -> str:
    return _letters(data, RADIO_LETTERS)


def survival_letters(data: Field19Data) -> str:
    return _letters(data, SURVIVAL_LETTERS)


def jacket_letters(data: Field19Data) -> str:
    return _letters(data, JACKET_LETTERS)


def encode_field19(data: Field19Data) -> str:
    """Build the Field 19 string in the fixed E P R S J D A N C order."""
    parts: list[str] = []

    if data.endurance:
        parts.append(f"E\\{data.endurance}")
    if data.persons:
        parts.append(f"P\\{data.persons}")
    for code, letters in (
        ("R", radio_letters(data)),
        ("S", survival_letters(data)),
        ("J", jacket_letters(data)),
    ):
        if letters:
            parts.append(f"{code}\\{letters}")

    if data.dinghies_enabled and data.dinghies_number:
        dinghy = [f"D\\{data.dinghies_number}"]
        if data.dinghies_capacity:
            dinghy.append(data.dinghies_capacity)
        if data.dinghies_cover:
            dinghy.append("C")
        if data.dinghies_colour:
            dinghy.append(data.dinghies_colour)
        parts.append(" ".join(dinghy))

    if data.aircraft_colour:
        parts.append(f"A\\{data.aircraft_colour}")
    if data.remarks:
        parts.append(f"N\\{data.remarks}")
    if data.pilot_in_command:
        parts.append(f"C\\{data.pilot_in_command}")

    return " ".join(parts)


def _dinghy_trailer(text: str, start: int, next_token: int) -> tuple[str, bool, str]:
    """Read ``capacity [C] colour`` words written after the ``D\\`` value."""
    words = text[start:next_token].split()
    capacity = ""
    cover = False
    if words and words[0].isdigit():
        capacity = words.pop(0)
    if words and words[0] == "C":
        cover = True
        words.pop(0)
    return capacity, cover, " ".join(words)


def decode_field19(text: str) -> Field19Data:
    """Parse a Field 19 string.

    ``C\\`` resolution follows the portal's own reading: a ``C\\`` token
    after ``D\\`` (or with no ``D\\`` at all) is the pilot in command, one
    before ``D\\`` marks the dinghies as covered.

    Values are single words. Anything after whitespace that is not the
    dinghy trailer is dropped, so ``A\\WHITE RED`` reads as ``WHITE``.
    """
    values: dict[str, object] = {}
    if not text:
        return Field19Data()

    tokens = list(_F19_TOKEN.finditer(text))
    dinghy_pos = next((m.start() for m in tokens if m.group(1) == "D"), -1)

    for index, match in enumerate(tokens):
        code, value = match.group(1), match.group(2)

        if code == "E":
            values["endurance"] = value
        elif code == "P":
            values["persons"] = value
        elif code == "R":
            values.update(_flags(value, RADIO_LETTERS))
        elif code == "S":
            values.update(_flags(value, SURVIVAL_LETTERS))
        elif code == "J":
            values.update(_flags(value, JACKET_LETTERS))
        elif code == "D":
            next_token = tokens[index + 1].start() if index + 1 < len(tokens) else len(text)
            capacity, cover, colour = _dinghy_trailer(text, match.end(), next_token)
            values.update(
                dinghies_enabled=True,
                dinghies_number=value,
                dinghies_capacity=capacity,
                dinghies_colour=colour,
            )
            if cover:
                values["dinghies_cover"] = True
        elif code == "A":
            values["aircraft_colour"] = value
        elif code == "N":
            values["remarks"] = value
        elif code == "C":
            if match.start() > dinghy_pos:
                values["pilot_in_command"] = value
            else:
                values["dinghies_cover"] = True
            logger.debug(
                "Field 19 C\\ at %d resolved as %s (D\\ at %d)",
                match.start(),
                "pilot in command" if match.start() > dinghy_pos else "dinghy cover",
                dinghy_pos,
            )

    return Field19Data.model_validate(values)


# ============ Template columns ============

def field19_from_template(template: TemplateData) -> Field19Data:
    """Rebuild structured Field 19 data from a stored template's columns."""
    radio = template.radio or ""
    survival = template.survival or ""
    jackets = template.jackets or ""
    return Field19Data(
        endurance=template.endurance or "",
        persons=template.persons_on_board or "",
        **_flags(radio, RADIO_LETTERS),
        **_flags(survival, SURVIVAL_LETTERS),
        **_flags(jackets, JACKET_LETTERS),
        dinghies_enabled=bool(template.dinghies_number),
        dinghies_number=template.dinghies_number or "",
        dinghies_capacity=template.dinghies_capacity or "",
        dinghies_cover=template.dinghies_cover,
        dinghies_colour=template.dinghies_colour or "",
        aircraft_colour=template.aircraft_colour or "",
        remarks=template.remarks or "",
        pilot_in_command=template.pilot_in_command or "",
    )


def template_field19(data: Field19Data) -> TemplateField19:
    """Flatten structured Field 19 data into template save columns."""
    return TemplateField19(
        radio=radio_letters(data),
        survival=survival_letters(data),
        jackets=jacket_letters(data),
        endurance=data.endurance,
        persons=data.persons,
        dinghies_number=data.dinghies_number if data.dinghies_enabled else "",
        dinghies_capacity=data.dinghies_capacity if data.dinghies_enabled else "",
        dinghies_cover=data.dinghies_cover if data.dinghies_enabled else False,
        dinghies_colour=data.dinghies_colour if data.dinghies_enabled else "",
        aircraft_colour=data.aircraft_colour,
        remarks=data.remarks,
        pilot_in_command=data.pilot_in_command,
    )
