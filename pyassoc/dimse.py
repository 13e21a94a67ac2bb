"""DIMSE *Command Field* values and request/response pairing."""

from enum import IntEnum


class CommandField(IntEnum):
    """The (0000,0100) *Command Field* values of the DIMSE messages.

    Request codes have the top bit clear and the matching response code is
    the request code with the top bit set, so a pending request can be
    paired with its response using :attr:`inverse`.

    Examples
    --------

    >>> from pyassoc.dimse import CommandField
    >>> CommandField.C_ECHO_RQ.inverse
    <CommandField.C_ECHO_RSP: 32816>
    >>> CommandField(0x8001).message_type
    'C-STORE-RSP'

    References
    ----------

    * DICOM Standard, Part 7, :dcm:`Annex E <part07/chapter_E.html>`
    """

    NONE = 0x0000
    C_STORE_RQ = 0x0001
    C_STORE_RSP = 0x8001
    C_GET_RQ = 0x0010
    C_GET_RSP = 0x8010
    C_FIND_RQ = 0x0020
    C_FIND_RSP = 0x8020
    C_MOVE_RQ = 0x0021
    C_MOVE_RSP = 0x8021
    C_ECHO_RQ = 0x0030
    C_ECHO_RSP = 0x8030
    N_EVENT_REPORT_RQ = 0x0100
    N_EVENT_REPORT_RSP = 0x8100
    N_GET_RQ = 0x0110
    N_GET_RSP = 0x8110
    N_SET_RQ = 0x0120
    N_SET_RSP = 0x8120
    N_ACTION_RQ = 0x0130
    N_ACTION_RSP = 0x8130
    N_CREATE_RQ = 0x0140
    N_CREATE_RSP = 0x8140
    N_DELETE_RQ = 0x0150
    N_DELETE_RSP = 0x8150
    # There is no C-CANCEL response
    C_CANCEL_RQ = 0x0FFF

    @classmethod
    def from_code(cls, code: int) -> "CommandField | None":
        """Return the member for `code` or ``None`` if it isn't a known
        *Command Field* value.
        """
        try:
            return cls(code)
        except ValueError:
            return None

    @property
    def inverse(self) -> "CommandField":
        """Return the response for a request and the request for a response.

        ``NONE`` and ``C_CANCEL_RQ`` have no counterpart and are returned
        unchanged.
        """
        return _INVERSE[self]

    @property
    def is_request(self) -> bool:
        """Return ``True`` if the value is a request (other than ``NONE``)."""
        return self is not CommandField.NONE and not self & 0x8000

    @property
    def is_response(self) -> bool:
        """Return ``True`` if the value is a response."""
        return bool(self & 0x8000)

    @property
    def message_type(self) -> str:
        """Return the message name as used by the standard, e.g.
        ``'N-EVENT-REPORT-RSP'``.
        """
        return self.name.replace("_", "-")


_PAIRS = [
    (CommandField.C_STORE_RQ, CommandField.C_STORE_RSP),
    (CommandField.C_GET_RQ, CommandField.C_GET_RSP),
    (CommandField.C_FIND_RQ, CommandField.C_FIND_RSP),
    (CommandField.C_MOVE_RQ, CommandField.C_MOVE_RSP),
    (CommandField.C_ECHO_RQ, CommandField.C_ECHO_RSP),
    (CommandField.N_EVENT_REPORT_RQ, CommandField.N_EVENT_REPORT_RSP),
    (CommandField.N_GET_RQ, CommandField.N_GET_RSP),
    (CommandField.N_SET_RQ, CommandField.N_SET_RSP),
    (CommandField.N_ACTION_RQ, CommandField.N_ACTION_RSP),
    (CommandField.N_CREATE_RQ, CommandField.N_CREATE_RSP),
    (CommandField.N_DELETE_RQ, CommandField.N_DELETE_RSP),
]

_INVERSE: dict[CommandField, CommandField] = {
    CommandField.NONE: CommandField.NONE,
    CommandField.C_CANCEL_RQ: CommandField.C_CANCEL_RQ,
}
for _rq, _rsp in _PAIRS:
    _INVERSE[_rq] = _rsp
    _INVERSE[_rsp] = _rq
