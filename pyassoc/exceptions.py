"""Exceptions raised by pyassoc."""


class MalformedPDUError(ValueError):
    """Raised when an encoded PDU or PDU item can't be decoded.

    Typically because the buffer is shorter than a field being read, a
    sub-item's *Item Length* runs past the end of the data or the leading
    *Item Type* isn't the one expected.

    The ``decode()`` class methods of the items and PDUs catch this and
    return ``None`` instead, so it only reaches users of :mod:`pyassoc.codec`.
    """
