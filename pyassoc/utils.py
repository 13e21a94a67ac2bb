"""Various utility functions."""

import logging
from typing import Sequence

from pydicom.uid import UID

from pyassoc import _config


LOGGER = logging.getLogger(__name__)


def decode_bytes(encoded_value: bytes) -> str:
    """Return the decoded string from `encoded_value`.

    Each of the codecs in :attr:`~pyassoc._config.CODECS` is tried in turn
    and the first successful result returned.

    Parameters
    ----------
    encoded_value : bytes
        The encoded value to be decoded.

    Returns
    -------
    str
        The decoded string.

    Raises
    ------
    ValueError
        If none of the configured codecs is able to decode the value.
    """
    codecs: Sequence[str] = _config.CODECS or ("ascii",)
    for codec in codecs:
        try:
            return encoded_value.decode(codec, errors="strict")
        except UnicodeError:
            LOGGER.debug(f"Unable to decode value using the '{codec}' codec")

    as_hex = " ".join([f"{b:02X}" for b in encoded_value])
    raise ValueError(
        f"Unable to decode '{as_hex}' using the {', '.join(codecs)} codec(s)"
    )


def pretty_bytes(
    bytestream: bytes,
    prefix: str = "  ",
    delimiter: str = "  ",
    items_per_line: int = 16,
    max_size: int | None = 512,
    suffix: str = "",
) -> list[str]:
    """Turn the bytestring `bytestream` into a :class:`list` of nicely
    formatted :class:`str`.

    Parameters
    ----------
    bytestream : bytes
        The bytes to convert to a nicely formatted string list
    prefix : str
        Insert `prefix` at the start of every item in the output string list
    delimiter : str
        Delimit each of the bytes in `bytestream` using `delimiter`
    items_per_line : int
        The number of bytes in each item of the output string list.
    max_size : int or None
        The maximum number of bytes to add to the output string list. A value
        of ``None`` indicates that all of `bytestream` should be output.
    suffix : str
        Append `suffix` to the end of every item in the output string list

    Returns
    -------
    list of str
        The output string list
    """
    lines = []
    limit = len(bytestream) if max_size is None else min(max_size, len(bytestream))
    for ii in range(0, limit, items_per_line):
        chunk = bytestream[ii : min(ii + items_per_line, limit)]
        lines.append(prefix + delimiter.join(f"{x:02x}" for x in chunk) + suffix)

    if limit < len(bytestream):
        lines.insert(0, prefix + f"Only dumping {max_size} bytes.")

    return lines


def set_ae(
    value: str | bytes | None,
    name: str,
    allow_empty: bool = True,
    allow_none: bool = True,
) -> str | None:
    """Convert `value` to an **AE** like parameter and apply validation.

    Parameters
    ----------
    value : str, bytes or None
        The value to be converted, :class:`bytes` are decoded first and have
        any leading or trailing spaces removed.
    name : str
        The name of the parameter being converted, used in error messages.
    allow_empty : bool, optional
        If ``False`` then an empty value or one consisting entirely of spaces
        raises a :class:`ValueError`.
    allow_none : bool, optional
        If ``True`` (default) then return ``None`` when `value` is ``None``.

    Returns
    -------
    str or None
    """
    if allow_none and value is None:
        return None

    if isinstance(value, bytes):
        value = decode_bytes(value).strip()

    if not isinstance(value, str):
        s = "str, bytes or None" if allow_none else "str or bytes"
        raise TypeError(f"'{name}' must be {s}, not '{value.__class__.__name__}'")

    if not allow_empty and not value.strip():
        msg = f"Invalid '{name}' value - must not be empty or only spaces"
        LOGGER.error(msg)
        raise ValueError(msg)

    if value:
        result, reason = _config.VALIDATORS["AE"](value)
        if not result:
            msg = f"Invalid '{name}' value '{value}' - {reason}"
            LOGGER.error(msg)
            raise ValueError(msg)

    return value


def set_uid(
    value: None | str | bytes | UID,
    name: str,
    allow_none: bool = True,
    validate: bool = True,
) -> UID | None:
    """Convert `value` to a :class:`UID` and apply validation.

    Parameters
    ----------
    value : str, bytes, UID (and optionally None)
        The value to be converted, :class:`bytes` are decoded using
        :func:`decode_bytes`.
    name : str
        The name of the parameter being converted.
    allow_none : bool, optional
        Allow the returned value to be ``None`` if `value` is ``None``
        (default ``True``).
    validate : bool, optional
        If ``True`` (default) check the UID using the ``"UI"`` validator in
        :attr:`~pyassoc._config.VALIDATORS` and raise a :class:`ValueError`
        if it fails. If ``False`` return the UID without any checks, which is
        used for values decoded from a peer.

    Returns
    -------
    pydicom.uid.UID or None
    """
    if allow_none and value is None:
        return None

    if isinstance(value, bytes):
        value = decode_bytes(value)

    if not isinstance(value, str):  # Includes UID
        s = "str, bytes, UID or None" if allow_none else "str, bytes or UID"
        raise TypeError(f"'{name}' must be {s}, not '{value.__class__.__name__}'")

    value = UID(value)
    if not validate:
        return value

    result, reason = _config.VALIDATORS["UI"](value)
    if not result:
        msg = f"Invalid '{name}' value '{value}' - {reason}"
        LOGGER.error(msg)
        raise ValueError(msg)

    # Note: conformance may be different from validity
    if not value.is_valid:
        LOGGER.warning(f"Non-conformant '{name}' value '{value}'")

    return value
