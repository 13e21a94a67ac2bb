"""Implementation of the Presentation Context item and its negotiation."""

import logging
from typing import Any, NamedTuple, Sequence, cast

from pydicom.uid import UID

from pyassoc._globals import (
    DEFAULT_TRANSFER_SYNTAXES,
    PRESENTATION_CONTEXT_AC_ITEM,
    PRESENTATION_CONTEXT_RQ_ITEM,
    TRANSFER_SYNTAX_SUB_ITEM,
    RESULT_ACCEPTANCE,
    RESULT_USER_REJECTION,
    RESULT_PROVIDER_REJECTION,
    RESULT_ABSTRACT_SYNTAX_NOT_SUPPORTED,
    RESULT_TRANSFER_SYNTAX_NOT_SUPPORTED,
    OptionalUIDType,
)
from pyassoc.codec import PACK_UCHAR, PACK_UINT2, read_uint8, read_uint16, subrange
from pyassoc.exceptions import MalformedPDUError
from pyassoc.pdu_items import AbstractSyntaxSubItem, TransferSyntaxSubItem
from pyassoc.utils import pretty_bytes, set_uid


LOGGER = logging.getLogger(__name__)


class PresentationContextTuple(NamedTuple):
    """:func:`namedtuple<collections.namedtuple>` representation of an accepted
    :class:`PresentationContext`.
    """

    context_id: int
    abstract_syntax: UID | None
    transfer_syntax: UID | None


class PresentationContext:
    """A Presentation Context item.

    **Rules**

    - Each Presentation Context (request) contains:

      - One context ID, an odd integer between 1 and 255.
      - One abstract syntax.
      - One or more transfer syntaxes, in order of preference.
    - Each Presentation Context (response) contains:

      - One context ID, corresponding to a Presentation Context received from
        the *Requestor*
      - A result, one of ``0x00`` (acceptance), ``0x01`` (user rejection),
        ``0x02`` (provider rejection), ``0x03`` (abstract syntax not supported)
        or ``0x04`` (transfer syntaxes not supported).
      - If the result is ``0x00``, then the accepted transfer syntax.
    - The same abstract syntax can be present in more than one Presentation
      Context.
    - Only one transfer syntax can be accepted per Presentation Context.

    The context's values can't be changed after it has been created.

    Parameters
    ----------
    context_id : int, optional
        The context ID, between 1 and 255. Even values aren't conformant but
        are allowed so that any context received from a peer can be
        represented.
    abstract_syntax : str, bytes or pydicom.uid.UID, optional
        The abstract syntax, only present in the request shape.
    transfer_syntax : list of (str, bytes or pydicom.uid.UID), optional
        The proposed transfer syntaxes, in order of preference.
    accepted_transfer_syntax : str, bytes or pydicom.uid.UID, optional
        The transfer syntax chosen by the *Acceptor*.
    result : int, optional
        The result of the negotiation, only present in the accept shape.
    validate : bool, optional
        If ``True`` (default) then the UIDs will be validated, values decoded
        from a peer are never validated.

    References
    ----------

    * DICOM Standard, Part 7, Annex :dcm:`D.3.2<part07.html#sect_D.3.2>`
    * DICOM Standard, Part 8, Sections :dcm:`9.3.2.2
      <part08.html#sect_9.3.2.2>` and :dcm:`9.3.3.2 <part08.html#sect_9.3.3.2>`
    """

    def __init__(
        self,
        context_id: int | None = None,
        abstract_syntax: OptionalUIDType = None,
        transfer_syntax: Sequence[str | bytes | UID] | None = None,
        accepted_transfer_syntax: OptionalUIDType = None,
        result: int | None = None,
        validate: bool = True,
    ) -> None:
        if context_id is not None:
            if not isinstance(context_id, int) or not 1 <= context_id <= 255:
                msg = "'context_id' must be an integer between 1 and 255, inclusive"
                LOGGER.error(msg)
                raise ValueError(msg)

            if context_id % 2 == 0:
                LOGGER.warning(f"Non-conformant (even) context ID '{context_id}'")

        if result is not None and (not isinstance(result, int) or not 0 <= result <= 255):
            msg = f"Invalid presentation context 'result' value '{result}'"
            LOGGER.error(msg)
            raise ValueError(msg)

        self._context_id = context_id
        self._abstract_syntax = (
            set_uid(abstract_syntax, "abstract_syntax", validate=validate) or None
        )
        self._accepted_transfer_syntax = (
            set_uid(
                accepted_transfer_syntax, "accepted_transfer_syntax", validate=validate
            )
            or None
        )
        self._result = result

        if isinstance(transfer_syntax, (str, bytes)):
            raise TypeError("'transfer_syntax' must be a list")

        self._transfer_syntax: list[UID] = []
        for syntax in transfer_syntax or []:
            self._add_transfer_syntax(syntax, validate)

    def _add_transfer_syntax(self, syntax: str | bytes | UID, validate: bool) -> None:
        """Append a transfer syntax to the presentation context."""
        uid = set_uid(syntax, "transfer_syntax", allow_none=False, validate=validate)
        if not validate:
            self._transfer_syntax.append(cast(UID, uid))
            return

        uid = cast(UID, uid)
        if uid in self._transfer_syntax:
            return

        if not uid.is_private and not uid.is_transfer_syntax:
            LOGGER.warning(
                "A UID has been added to 'transfer_syntax' that is not a "
                f"transfer syntax: '{uid}'"
            )

        self._transfer_syntax.append(uid)

    @property
    def abstract_syntax(self) -> UID | None:
        """Return the context's *Abstract Syntax* as
        :class:`~pydicom.uid.UID`.
        """
        return self._abstract_syntax

    @property
    def accepted_transfer_syntax(self) -> UID | None:
        """Return the transfer syntax chosen by the *Acceptor*."""
        return self._accepted_transfer_syntax

    @property
    def as_tuple(self) -> PresentationContextTuple:
        """Return a :func:`namedtuple<collections.namedtuple>` representation
        of the presentation context.

        Intended to be used when the result is ``0x00`` (accepted) as only the
        accepted (or first) transfer syntax is returned in the tuple.
        """
        syntaxes = self._encoded_syntaxes()
        return PresentationContextTuple(
            cast(int, self.context_id),
            self.abstract_syntax,
            syntaxes[0] if syntaxes else None,
        )

    @property
    def context_id(self) -> int | None:
        """Return the context's *ID* parameter as an :class:`int`."""
        return self._context_id

    @classmethod
    def decode(cls, bytestream: bytes) -> "PresentationContext | None":
        """Return a :class:`PresentationContext` decoded from `bytestream`.

        The *Item Length* is only trusted as far as the actual length of
        `bytestream`.

        Parameters
        ----------
        bytestream : bytes
            An encoded Presentation Context (RQ) or (AC) item.

        Returns
        -------
        PresentationContext or None
            The decoded context, or ``None`` if `bytestream` isn't a
            Presentation Context item or it's malformed.
        """
        item_type = bytestream[:1]
        if item_type not in (
            PACK_UCHAR(PRESENTATION_CONTEXT_RQ_ITEM),
            PACK_UCHAR(PRESENTATION_CONTEXT_AC_ITEM),
        ):
            LOGGER.debug(
                "Not a Presentation Context item: "
                f"0x{bytestream[:1].hex().upper() or '(empty)'}"
            )
            return None

        try:
            item_length = read_uint16(bytestream, 2)
            bytestream = bytestream[: 4 + item_length]
            if len(bytestream) < 8:
                raise MalformedPDUError(
                    f"Only {len(bytestream)} bytes available, at least 8 are required"
                )

            context_id = read_uint8(bytestream, 4)
            result = read_uint8(bytestream, 6)
            is_request = item_type == PACK_UCHAR(PRESENTATION_CONTEXT_RQ_ITEM)
            if context_id == 0:
                raise MalformedPDUError("The context ID must not be 0")

            offset = 8
            abstract_syntax = None
            # Only the literal 0x30 sub-item type is an abstract syntax
            if is_request and bytestream[offset : offset + 1] == b"\x30":
                length = read_uint16(bytestream, offset + 2)
                item = AbstractSyntaxSubItem()
                item.decode(subrange(bytestream, offset, 4 + length))
                abstract_syntax = item.abstract_syntax_name
                offset += 4 + length

            transfer_syntax = []
            while bytestream[offset : offset + 1] == PACK_UCHAR(TRANSFER_SYNTAX_SUB_ITEM):
                try:
                    length = read_uint16(bytestream, offset + 2)
                    encoded = subrange(bytestream, offset, 4 + length)
                except MalformedPDUError as exc:
                    LOGGER.warning(
                        f"Ignoring a truncated Transfer Syntax sub-item: {exc}"
                    )
                    break

                offset += 4 + length
                item = TransferSyntaxSubItem()
                try:
                    item.decode(encoded)
                except MalformedPDUError as exc:
                    LOGGER.warning(
                        f"Skipping an undecodable Transfer Syntax sub-item: {exc}"
                    )
                    continue

                if item.transfer_syntax_name:
                    transfer_syntax.append(item.transfer_syntax_name)
                else:
                    LOGGER.warning("Skipping an empty Transfer Syntax sub-item")
        except MalformedPDUError as exc:
            LOGGER.error(f"Unable to decode the Presentation Context item: {exc}")
            for line in pretty_bytes(bytestream):
                LOGGER.debug(line)

            return None

        return cls(
            context_id=context_id,
            abstract_syntax=abstract_syntax,
            transfer_syntax=transfer_syntax,
            accepted_transfer_syntax=(
                transfer_syntax[0] if not is_request and transfer_syntax else None
            ),
            result=None if is_request else result,
            validate=False,
        )

    def _encoded_syntaxes(self) -> list[UID]:
        """Return the transfer syntaxes that will be encoded by default."""
        if self.accepted_transfer_syntax:
            return [self.accepted_transfer_syntax]

        return list(self._transfer_syntax)

    def encode(self, only_accepted_transfer_syntax: OptionalUIDType = None) -> bytes:
        """Return the encoded Presentation Context item.

        Parameters
        ----------
        only_accepted_transfer_syntax : str, bytes or pydicom.uid.UID, optional
            If used then encode a single Transfer Syntax sub-item with the
            value, regardless of the context's transfer syntaxes. If not used
            then the :attr:`accepted_transfer_syntax` is encoded when set,
            otherwise each of the :attr:`transfer_syntax` in order.

        Returns
        -------
        bytes
            A Presentation Context (RQ) item when the context has an abstract
            syntax, a Presentation Context (AC) item otherwise.
        """
        if self.context_id is None:
            msg = "Unable to encode a presentation context without a context ID"
            LOGGER.error(msg)
            raise ValueError(msg)

        if only_accepted_transfer_syntax:
            syntaxes = [
                set_uid(only_accepted_transfer_syntax, "only_accepted_transfer_syntax")
            ]
        else:
            syntaxes = cast(list[UID | None], self._encoded_syntaxes())

        abstract_bytes = b""
        if self.abstract_syntax:
            abstract_bytes = AbstractSyntaxSubItem(
                self.abstract_syntax, validate=False
            ).encode()

        transfer_bytes = b"".join(
            TransferSyntaxSubItem(syntax, validate=False).encode() for syntax in syntaxes
        )

        item_type = PRESENTATION_CONTEXT_RQ_ITEM
        if not self.abstract_syntax:
            item_type = PRESENTATION_CONTEXT_AC_ITEM

        return (
            PACK_UCHAR(item_type)
            + PACK_UCHAR(0x00)
            + PACK_UINT2(4 + len(abstract_bytes) + len(transfer_bytes))
            + PACK_UCHAR(self.context_id)
            + PACK_UCHAR(0x00)
            + PACK_UCHAR(self.result or 0x00)
            + PACK_UCHAR(0x00)
            + abstract_bytes
            + transfer_bytes
        )

    def __eq__(self, other: Any) -> bool:
        """Return ``True`` if `self` is equal to `other`."""
        if self is other:
            return True

        if isinstance(other, self.__class__):
            return self._key() == other._key()

        return NotImplemented

    def __hash__(self) -> int:
        """Return a hash of the context."""
        return hash(self._key())

    def _key(self) -> tuple[Any, ...]:
        return (
            self.context_id,
            self.abstract_syntax,
            tuple(self._encoded_syntaxes()),
            self.result,
        )

    def __ne__(self, other: Any) -> bool:
        """Return ``True`` if `self` does not equal `other`."""
        return not self == other

    def __repr__(self) -> str:
        """Representation of the Presentation Context."""
        name = self.abstract_syntax.name if self.abstract_syntax else None
        return f"<PresentationContext: ID {self.context_id}, {name}>"

    @property
    def result(self) -> int | None:
        """Return the context's *Result*, ``None`` for a request."""
        return self._result

    @property
    def status(self) -> str:
        """Return a descriptive :class:`str` of the context's *Result*."""
        return _STATUS.get(self.result, "Unknown")

    def __str__(self) -> str:
        """String representation of the Presentation Context."""
        s = []
        if self.context_id is not None:
            s.append(f"ID: {self.context_id}")

        if self.abstract_syntax is not None:
            s.append(f"Abstract Syntax: {self.abstract_syntax.name}")

        s.append("Transfer Syntax(es):")
        syntaxes = self._encoded_syntaxes()
        if not syntaxes:
            s.append("    (none)")
        else:
            s.extend(f"    ={ts.name}" for ts in syntaxes)

        if self.result is not None:
            s.append(f"Result: {self.status}")

        return "\n".join(s)

    @property
    def transfer_syntax(self) -> list[UID]:
        """Return a :class:`list` of the context's *Transfer Syntaxes*.

        For a context decoded from an A-ASSOCIATE-AC this will contain the
        accepted transfer syntax (if any).
        """
        return list(self._transfer_syntax)


ListCXType = list[PresentationContext]


def negotiate_as_acceptor(
    rq_contexts: ListCXType, ac_contexts: ListCXType
) -> ListCXType:
    """Process the Presentation Contexts as an Association *Acceptor*.

    Parameters
    ----------
    rq_contexts : list of PresentationContext
        The Presentation Contexts proposed by the peer. Each item has
        values for Context ID, Abstract Syntax and Transfer Syntax.
    ac_contexts : list of PresentationContext
        The Presentation Contexts supported by the local AE when acting
        as an Association *Acceptor*. Each item has values for Abstract Syntax
        and Transfer Syntax, the order of the transfer syntaxes is the
        *Acceptor's* preference.

    Returns
    -------
    list of PresentationContext
        The negotiated presentation context items, each with a Result value
        a Context ID and an Abstract Syntax, plus the accepted transfer syntax
        if the result is ``0x00``. Items are sorted in increasing Context ID
        value.
    """
    result_contexts: ListCXType = []

    # No requestor presentation contexts
    if not rq_contexts:
        return result_contexts

    # Requestor may use the same Abstract Syntax in multiple Presentation
    #   Contexts so we need a more specific key than UID
    requestor_contexts = {(cx.context_id, cx.abstract_syntax): cx for cx in rq_contexts}
    # Acceptor supported SOP Classes must be unique so we can use UID as
    #   the key
    acceptor_contexts = {cx.abstract_syntax: cx for cx in ac_contexts}

    for (cntx_id, ab_syntax), rq_context in requestor_contexts.items():
        accepted = None
        result = RESULT_ABSTRACT_SYNTAX_NOT_SUPPORTED

        # Check if the acceptor supports the Abstract Syntax
        if ab_syntax in acceptor_contexts:
            result = RESULT_TRANSFER_SYNTAX_NOT_SUPPORTED
            for tr_syntax in acceptor_contexts[ab_syntax].transfer_syntax:
                if tr_syntax in rq_context.transfer_syntax:
                    accepted = tr_syntax
                    result = RESULT_ACCEPTANCE
                    break

        if result != RESULT_ACCEPTANCE:
            LOGGER.info(
                f"Rejecting presentation context {cntx_id}: "
                f"{_STATUS[result].lower()}"
            )

        result_contexts.append(
            PresentationContext(
                context_id=cntx_id,
                abstract_syntax=ab_syntax,
                accepted_transfer_syntax=accepted,
                result=result,
                validate=False,
            )
        )

    # Sort by presentation context ID
    #   This isn't required by the DICOM Standard but its a nice thing to do
    return sorted(result_contexts, key=lambda x: cast(int, x.context_id))


def negotiate_as_requestor(
    rq_contexts: ListCXType, ac_contexts: ListCXType
) -> ListCXType:
    """Process the Presentation Contexts as an Association *Requestor*.

    The *Acceptor* has processed the *Requestor's* presentation context
    definition list and returned the results. Returns a list of
    :class:`PresentationContext` with the Results and original Abstract Syntax
    values to make things easier to use.

    Parameters
    ----------
    rq_contexts : list of PresentationContext
        The Presentation Contexts sent to the peer as the A-ASSOCIATE's
        Presentation Context Definition List.
    ac_contexts : list of PresentationContext
        The Presentation Contexts return by the peer as the A-ASSOCIATE's
        Presentation Context Definition Result List.

    Returns
    -------
    list of PresentationContext
        The contexts in the returned Presentation Context Definition Result
        List, with added Abstract Syntax value. Items are sorted in
        increasing Context ID value. Any proposed contexts the *Acceptor*
        didn't reply to are treated as rejected by the provider (``0x02``).
    """
    if not rq_contexts:
        raise ValueError("Requestor contexts are required")

    output = []

    # Create dicts, indexed by the presentation context ID
    requestor_contexts = {context.context_id: context for context in rq_contexts}
    acceptor_contexts = {context.context_id: context for context in ac_contexts}

    for context_id, rq_context in requestor_contexts.items():
        accepted = None
        result = RESULT_PROVIDER_REJECTION
        if context_id in acceptor_contexts:
            ac_context = acceptor_contexts[context_id]
            result = cast(int, ac_context.result)
            # The transfer syntax is only significant when accepted
            if result == RESULT_ACCEPTANCE and ac_context.transfer_syntax:
                accepted = ac_context.transfer_syntax[0]
        else:
            LOGGER.warning(
                f"The Acceptor didn't reply to presentation context {context_id}"
            )

        output.append(
            PresentationContext(
                context_id=context_id,
                abstract_syntax=rq_context.abstract_syntax,
                accepted_transfer_syntax=accepted,
                result=result,
                validate=False,
            )
        )

    # Sort returned list by context ID
    return sorted(output, key=lambda x: cast(int, x.context_id))


def build_context(
    abstract_syntax: str | UID,
    transfer_syntax: None | str | UID | list[str | UID] = None,
    context_id: int | None = None,
) -> PresentationContext:
    """Return a :class:`PresentationContext` built from the `abstract_syntax`.

    Parameters
    ----------
    abstract_syntax : str or UID
        The :class:`~pydicom.uid.UID` to use as the abstract syntax.
    transfer_syntax : str/UID or list of str/UID
        The transfer syntax UID(s) to use (default:
        ``[Implicit VR Little Endian, Explicit VR Little Endian,
        Deflated Explicit VR Little Endian, Explicit VR Big Endian]``)
    context_id : int, optional
        The context ID, if not used then it will be assigned when the
        context is sent.

    Examples
    --------

    Specifying a presentation context with the default transfer syntaxes

    >>> from pyassoc import build_context
    >>> context = build_context('1.2.840.10008.1.1')
    >>> print(context)
    Abstract Syntax: Verification SOP Class
    Transfer Syntax(es):
        =Implicit VR Little Endian
        =Explicit VR Little Endian
        =Deflated Explicit VR Little Endian
        =Explicit VR Big Endian

    Specifying multiple transfer syntaxes

    >>> context = build_context(
    ...     '1.2.840.10008.1.1', ['1.2.840.10008.1.2', '1.2.840.10008.1.2.4.50']
    ... )

    Returns
    -------
    presentation.PresentationContext
    """
    if transfer_syntax is None:
        transfer_syntax = DEFAULT_TRANSFER_SYNTAXES

    # Allow single transfer syntax values for convenience
    if isinstance(transfer_syntax, str):
        transfer_syntax = [transfer_syntax]

    return PresentationContext(
        context_id=context_id,
        abstract_syntax=UID(abstract_syntax),
        transfer_syntax=transfer_syntax,  # type: ignore
    )


_STATUS = {
    None: "Pending",
    RESULT_ACCEPTANCE: "Accepted",
    RESULT_USER_REJECTION: "User Rejected",
    RESULT_PROVIDER_REJECTION: "Provider Rejected",
    RESULT_ABSTRACT_SYNTAX_NOT_SUPPORTED: "Abstract Syntax Not Supported",
    RESULT_TRANSFER_SYNTAX_NOT_SUPPORTED: "Transfer Syntax(es) Not Supported",
}
