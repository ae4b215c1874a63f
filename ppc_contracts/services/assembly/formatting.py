"""Value formatting shared by the contract renderers.

Every helper here degrades instead of failing: empty input renders the
placeholder text, malformed numbers render as their escaped raw string.
"""

from __future__ import annotations

import base64
import html
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional

PLACEHOLDER = "Not Provided"
EMPTY_LIST = "None specified"

# Decimal exponents beyond this render as raw text, e.g. "1e20000000"
MAX_MAGNITUDE = 15

# Signature slots keep the same box whether signed or not
SIGNATURE_WIDTH_PX = 220
SIGNATURE_HEIGHT_PX = 70

US_STATES: dict[str, str] = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "DC": "District of Columbia", "FL": "Florida", "GA": "Georgia", "HI": "Hawaii",
    "ID": "Idaho", "IL": "Illinois", "IN": "Indiana", "IA": "Iowa",
    "KS": "Kansas", "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine",
    "MD": "Maryland", "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota",
    "MS": "Mississippi", "MO": "Missouri", "MT": "Montana", "NE": "Nebraska",
    "NV": "Nevada", "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico",
    "NY": "New York", "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio",
    "OK": "Oklahoma", "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island",
    "SC": "South Carolina", "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas",
    "UT": "Utah", "VT": "Vermont", "VA": "Virginia", "WA": "Washington",
    "WV": "West Virginia", "WI": "Wisconsin", "WY": "Wyoming",
}

# "Austin, TX 78701" / "Austin TX 78701-1234"
_STATE_BEFORE_ZIP = re.compile(r"\b([A-Z]{2})\s*,?\s+\d{5}(?:-\d{4})?\b")
# "Austin, TX" / "Austin, TX, USA"
_STATE_AFTER_COMMA = re.compile(r",\s*([A-Z]{2})\s*(?:,|$)")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _number_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def text(value: Any, placeholder: str = PLACEHOLDER) -> str:
    """Escaped display text for a scalar field."""
    if is_blank(value):
        return placeholder
    return html.escape(_number_text(value))


def _parse_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    raw = str(value).replace(",", "").replace("$", "").replace("%", "").strip()
    try:
        number = Decimal(raw)
    except InvalidOperation:
        return None
    if not number.is_finite() or abs(number.adjusted()) > MAX_MAGNITUDE:
        return None
    return number


def money(value: Any) -> str:
    """Fixed two-decimal currency, e.g. ``$1,250.00``."""
    if is_blank(value):
        return PLACEHOLDER
    number = _parse_decimal(value)
    if number is None:
        return html.escape(str(value).strip())
    return f"${number:,.2f}"


def percent(value: Any) -> str:
    if is_blank(value):
        return PLACEHOLDER
    number = _parse_decimal(value)
    if number is None:
        return html.escape(str(value).strip())
    return f"{number.normalize():f}%"


def quantity(value: Any, singular: str, plural: Optional[str] = None) -> str:
    """Number with a unit: ``90 seconds``, ``1 day``."""
    if is_blank(value):
        return PLACEHOLDER
    number = _parse_decimal(value)
    unit = singular if number == 1 else (plural or singular + "s")
    return f"{html.escape(_number_text(value))} {unit}"


def long_date(value: date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def bullet_list(items: Iterable[Any]) -> str:
    """Unordered list, or the empty-list placeholder when nothing is left."""
    entries = [text(item) for item in items if not is_blank(item)]
    if not entries:
        return f'<p class="placeholder">{EMPTY_LIST}</p>'
    rows = "".join(f"<li>{entry}</li>" for entry in entries)
    return f"<ul>{rows}</ul>"


def inline_list(items: Iterable[Any]) -> str:
    entries = [text(item) for item in items if not is_blank(item)]
    return ", ".join(entries) if entries else EMPTY_LIST


def find_state(address: Optional[str]) -> Optional[str]:
    """Full state name for the first U.S. state code found in an address."""
    if is_blank(address):
        return None
    for pattern in (_STATE_BEFORE_ZIP, _STATE_AFTER_COMMA):
        for match in pattern.finditer(address):
            name = US_STATES.get(match.group(1))
            if name:
                return name
    return None


def governing_state(addresses: Iterable[Optional[str]], default: str) -> str:
    """First state detected across the addresses, in order, else ``default``."""
    for address in addresses:
        state = find_state(address)
        if state:
            return state
    return default


def resolve_state_name(value: Optional[str]) -> Optional[str]:
    """Normalise an explicit state field ("TX", "texas", "Texas")."""
    if is_blank(value):
        return None
    candidate = value.strip()
    if candidate.upper() in US_STATES:
        return US_STATES[candidate.upper()]
    for name in US_STATES.values():
        if name.lower() == candidate.lower():
            return name
    return find_state(candidate)


def image_mime(data: bytes) -> str:
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data.startswith(b"GIF8"):
        return "image/gif"
    return "image/png"


def signature_slot(image: Optional[bytes], label: str, slot: Optional[str] = None) -> str:
    """Fixed-size signature box, with the captured image inlined when present.

    ``slot`` tags the box with the signer role so a stored body can have the
    image filled in later without re-rendering.
    """
    style = f"width:{SIGNATURE_WIDTH_PX}px;height:{SIGNATURE_HEIGHT_PX}px;"
    tag = f' data-slot="{slot}"' if slot else ""
    if not image:
        return f'<div class="signature-slot" style="{style}"{tag}></div>'
    encoded = base64.b64encode(image).decode("ascii")
    return (
        f'<div class="signature-slot" style="{style}"{tag}>'
        f'<img src="data:{image_mime(image)};base64,{encoded}" '
        f'alt="{html.escape(label)} signature" style="{style}object-fit:contain;"/>'
        f"</div>"
    )


__all__ = [
    "EMPTY_LIST",
    "MAX_MAGNITUDE",
    "PLACEHOLDER",
    "US_STATES",
    "bullet_list",
    "find_state",
    "governing_state",
    "image_mime",
    "inline_list",
    "is_blank",
    "long_date",
    "money",
    "percent",
    "quantity",
    "resolve_state_name",
    "signature_slot",
    "text",
]
