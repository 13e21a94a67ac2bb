"""Validation functions used by pyassoc"""

import logging
import re

from pydicom.uid import UID


LOGGER = logging.getLogger(__name__)

# Printable ASCII without the backslash
_AE_CHARACTERS = re.compile(r"^[\x20-\x5B\x5D-\x7E]*$")


def validate_ae(value: str) -> tuple[bool, str]:
    """Return ``True`` if `value` is a conformant **AE** value.

    An **AE** value must be a :class:`str` of no more than 16 printable ASCII
    characters, none of which may be a backslash. Leading and trailing
    spaces are not significant.

    Parameters
    ----------
    value : str
        The **AE** value to check.

    Returns
    -------
    tuple[bool, str]
        ``(True, "")`` if `value` is conformant, otherwise ``False`` and a
        short description of why the validation failed.
    """
    if not isinstance(value, str):
        return False, "must be str"

    if len(value) > 16:
        return False, "must not exceed 16 characters"

    if not value.isascii():
        return False, "must only contain ASCII characters"

    if not _AE_CHARACTERS.match(value):
        return False, "must not contain control characters or backslashes"

    return True, ""


def validate_ui(value: UID) -> tuple[bool, str]:
    """Return ``True`` if `value` is an acceptable **UI** value.

    When :attr:`~pyassoc._config.ENFORCE_UID_CONFORMANCE` is ``True`` the
    UID must be fully conformant (:attr:`pydicom.uid.UID.is_valid`),
    otherwise it only has to be 1 to 64 characters long.
    """
    from pyassoc import _config

    if not isinstance(value, str):
        return False, "must be pydicom.uid.UID"

    value = UID(value)
    if _config.ENFORCE_UID_CONFORMANCE:
        return (True, "") if value.is_valid else (False, "UID is non-conformant")

    if not value:
        return False, "must not be an empty str"

    if len(value) > 64:
        return False, "must not exceed 64 characters"

    return True, ""
