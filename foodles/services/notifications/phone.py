"""
Vendor phone number normalization.

Vendors type their numbers in every shape imaginable ("98765 43210",
"+91-98765-43210", "098765 43210"). The telephony provider wants E.164.
"""

import re

_NON_DIGITS = re.compile(r"\D")

# Length of a national subscriber number (India)
SUBSCRIBER_DIGITS = 10


def normalize_phone_number(raw: str, country_code: str = "91") -> str:
    """
    Convert a raw phone number to canonical ``+<cc><subscriber>`` form.

    Every non-digit is removed and leading trunk zeros are dropped. A bare
    10-digit subscriber number always gets the country code; anything else
    gets it unless it already starts with it. Empty input (after stripping)
    returns "" which callers must treat as an invalid target.

    >>> normalize_phone_number("098765 43210")
    '+919876543210'
    >>> normalize_phone_number("+91 98765 43210")
    '+919876543210'
    """
    digits = _NON_DIGITS.sub("", raw or "").lstrip("0")
    if not digits:
        return ""

    if len(digits) == SUBSCRIBER_DIGITS or not digits.startswith(country_code):
        digits = country_code + digits

    return f"+{digits}"
