"""ACSE association negotiation"""

import logging
from typing import Mapping, NamedTuple, Sequence, cast

from pydicom.uid import UID

from pyassoc import _config
from pyassoc._globals import (
    A_ASSOCIATE_AC_TYPE,
    A_ASSOCIATE_RQ_TYPE,
    APPLICATION_CONTEXT_NAME,
    DEFAULT_MAX_LENGTH,
    PROTOCOL_VERSION,
    PYASSOC_IMPLEMENTATION_UID,
    PYASSOC_IMPLEMENTATION_VERSION,
    RESULT_ACCEPTANCE,
    RESULT_TRANSFER_SYNTAX_NOT_SUPPORTED,
)
from pyassoc._handlers import standard_pdu_recv_handler, standard_pdu_sent_handler
from pyassoc.pdu import PDU, A_ASSOCIATE_AC, A_ASSOCIATE_RJ, A_ASSOCIATE_RQ
from pyassoc.pdu_items import UserInformationItem
from pyassoc.presentation import (
    PresentationContext,
    build_context,
    negotiate_as_acceptor,
    negotiate_as_requestor,
)
from pyassoc.utils import set_ae


LOGGER = logging.getLogger(__name__)

_ProposedType = PresentationContext | tuple[str | UID, str | UID | Sequence[str | UID]]
_ChosenType = str | UID | PresentationContext | None


class LocalIdentity(NamedTuple):
    """The identity used by the local AE when negotiating an association.

    Each :class:`ACSE` has its own identity, so associations with different
    AE titles or maximum lengths can be negotiated at the same time.
    """

    #: The local AE title, 1 to 16 characters
    ae_title: str = "PYASSOC"
    #: The *Implementation Class UID* sent to the peer
    implementation_class_uid: str | UID = PYASSOC_IMPLEMENTATION_UID
    #: The *Implementation Version Name* sent to the peer, ``None`` to not send
    implementation_version_name: str | None = PYASSOC_IMPLEMENTATION_VERSION
    #: The largest P-DATA-TF PDU the local AE will accept, ``0`` for no limit
    maximum_length: int = DEFAULT_MAX_LENGTH


class ACSE:
    """The Association Control Service Element (ACSE) service provider.

    Builds and parses the A-ASSOCIATE PDUs exchanged during association
    negotiation. The transport is the caller's responsibility: the encoded
    PDUs are returned as :class:`bytes` and received PDUs are passed in the
    same way.

    Parameters
    ----------
    identity : acse.LocalIdentity, optional
        The local AE's identity, defaults to ``LocalIdentity()``.
    supported_contexts : list of (presentation.PresentationContext or str), optional
        The abstract syntaxes supported when acting as the association
        *Acceptor*, either as presentation contexts or UIDs (which will use
        the default transfer syntaxes). The order of each context's transfer
        syntaxes is the order of preference.
    require_called_aet : bool, optional
        If ``True`` then reject association requests where the *Called AE
        Title* doesn't match the local AE title (default ``False``).

    Examples
    --------

    Association *Acceptor*

    >>> from pyassoc.acse import ACSE
    >>> acse = ACSE(supported_contexts=["1.2.840.10008.1.1"])
    >>> response = acse.respond(received)

    Association *Requestor*

    >>> acse = ACSE()
    >>> request = acse.serialize_associate_request(
    ...     [("1.2.840.10008.1.1", ["1.2.840.10008.1.2"])]
    ... )
    """

    def __init__(
        self,
        identity: LocalIdentity | None = None,
        supported_contexts: Sequence[PresentationContext | str | UID] | None = None,
        require_called_aet: bool = False,
    ) -> None:
        identity = identity or LocalIdentity()
        set_ae(identity.ae_title, "ae_title", False, False)
        self._identity = identity
        # Raises if the identity is invalid
        self._user_information = UserInformationItem(
            maximum_length=identity.maximum_length,
            implementation_class_uid=identity.implementation_class_uid,
            implementation_version_name=identity.implementation_version_name,
        )

        self.supported_contexts: list[PresentationContext] = []
        for cx in supported_contexts or []:
            if not isinstance(cx, PresentationContext):
                cx = build_context(cx)

            self.supported_contexts.append(cx)

        self.require_called_aet = require_called_aet

        # The contexts sent in the last A-ASSOCIATE-RQ
        self.requested_contexts: list[PresentationContext] = []

    @property
    def ae_title(self) -> str:
        """Return the local AE title."""
        return self._identity.ae_title

    @property
    def identity(self) -> LocalIdentity:
        """Return the local identity."""
        return self._identity

    @staticmethod
    def _log_pdu(
        pdu: PDU, sent: bool, requested: Sequence[PresentationContext] = ()
    ) -> None:
        if _config.LOG_HANDLER_LEVEL != "standard":
            return

        if sent:
            standard_pdu_sent_handler(pdu, requested)
        else:
            standard_pdu_recv_handler(pdu, requested)

    def negotiate(self, rq_contexts: Sequence[PresentationContext]) -> dict[int, UID | None]:
        """Return the transfer syntax chosen for each of the proposed
        presentation contexts.

        Parameters
        ----------
        rq_contexts : list of presentation.PresentationContext
            The presentation contexts proposed by the peer.

        Returns
        -------
        dict[int, pydicom.uid.UID | None]
            The accepted transfer syntax indexed by context ID, or ``None``
            if the context has been rejected. The chosen transfer syntax is the
            first of the locally supported transfer syntaxes that's been
            proposed by the peer.
        """
        results = negotiate_as_acceptor(list(rq_contexts), self.supported_contexts)
        return {
            cast(int, cx.context_id): cx.accepted_transfer_syntax for cx in results
        }

    @staticmethod
    def negotiated_max_length(peer_user_info: UserInformationItem) -> int:
        """Return the maximum size of the P-DATA-TF PDUs that may be sent to
        the peer.

        Parameters
        ----------
        peer_user_info : pdu_items.UserInformationItem
            The User Information received from the peer.

        Returns
        -------
        int
            The peer's *Maximum Length Received*, ``0`` for no limit.
        """
        max_length = peer_user_info.maximum_length
        if max_length == 0:
            LOGGER.debug("The peer has no maximum PDU length")

        return max_length

    def parse_associate_message(
        self, bytestream: bytes
    ) -> tuple[list[PresentationContext], UserInformationItem] | None:
        """Return the presentation contexts and User Information from an
        A-ASSOCIATE-RQ or A-ASSOCIATE-AC PDU.

        Parameters
        ----------
        bytestream : bytes
            The encoded PDU received from the peer.

        Returns
        -------
        tuple of (list of PresentationContext, UserInformationItem) or None
            The decoded presentation contexts and User Information, or
            ``None`` if `bytestream` isn't an A-ASSOCIATE-RQ or
            A-ASSOCIATE-AC, is malformed or has no (decodable) User
            Information item. Any presentation context items that couldn't
            be decoded are not included.
        """
        pdu = self._decode_associate(bytestream)
        if pdu is None:
            return None

        user_info = pdu.user_information
        if user_info is None:
            LOGGER.error(
                "The A-ASSOCIATE message has a missing or malformed User "
                "Information item"
            )
            return None

        return pdu.presentation_context, user_info

    def _decode_associate(self, bytestream: bytes) -> A_ASSOCIATE_RQ | A_ASSOCIATE_AC | None:
        """Return the decoded A-ASSOCIATE-RQ or -AC, or ``None`` on failure."""
        pdu_type = bytestream[:1]
        pdu: A_ASSOCIATE_RQ | A_ASSOCIATE_AC | None
        if pdu_type == bytes([A_ASSOCIATE_RQ_TYPE]):
            pdu = A_ASSOCIATE_RQ.decode(bytestream)
        elif pdu_type == bytes([A_ASSOCIATE_AC_TYPE]):
            pdu = A_ASSOCIATE_AC.decode(bytestream)
        else:
            LOGGER.error(
                "Expected an A-ASSOCIATE-RQ or A-ASSOCIATE-AC PDU, got a PDU "
                f"type of 0x{pdu_type.hex().upper() or '(none)'}"
            )
            return None

        if pdu is not None:
            self._log_pdu(pdu, sent=False, requested=self.requested_contexts)

        return pdu

    def process_accept(self, bytestream: bytes) -> list[PresentationContext] | None:
        """Return the negotiated presentation contexts from an A-ASSOCIATE-AC
        received in reply to the last A-ASSOCIATE-RQ.

        Parameters
        ----------
        bytestream : bytes
            The encoded A-ASSOCIATE-AC PDU.

        Returns
        -------
        list of PresentationContext or None
            The requested presentation contexts with the *Acceptor's* results,
            sorted by context ID, or ``None`` if the A-ASSOCIATE-AC is
            malformed. Contexts the *Acceptor* didn't reply to are treated as
            rejected.
        """
        if not self.requested_contexts:
            LOGGER.error("No A-ASSOCIATE-RQ has been sent")
            raise RuntimeError("No A-ASSOCIATE-RQ has been sent")

        parsed = self.parse_associate_message(bytestream)
        if parsed is None:
            return None

        return negotiate_as_requestor(self.requested_contexts, parsed[0])

    def respond(self, bytestream: bytes) -> bytes:
        """Return the encoded reply to an A-ASSOCIATE-RQ.

        The association is rejected if:

        * the A-ASSOCIATE-RQ is malformed or is missing the User Information
          (rejected permanent, service-provider (ACSE), no reason given)
        * the protocol version isn't supported (rejected permanent,
          service-provider (ACSE), protocol version not supported)
        * the application context name isn't supported (rejected permanent,
          service-user, application context name not supported)
        * the *Calling AE Title* can't be sent back in the reply (rejected
          permanent, service-user, calling AE title not recognised)
        * the *Called AE Title* is empty or can't be sent back in the reply
          (rejected permanent, service-user, called AE title not recognised)
        * `require_called_aet` is ``True`` and the *Called AE Title* doesn't
          match the local AE title (rejected permanent, service-user, called
          AE title not recognised)

        Otherwise the presentation contexts are negotiated and the
        association accepted, even if none of the contexts are accepted.

        Parameters
        ----------
        bytestream : bytes
            The encoded A-ASSOCIATE-RQ PDU received from the peer.

        Returns
        -------
        bytes
            The encoded A-ASSOCIATE-AC or A-ASSOCIATE-RJ PDU.
        """
        # If we reject association -> [result, source, diagnostic]
        reject_assoc_rsd: tuple[int, int, int] | None = None

        pdu = A_ASSOCIATE_RQ.decode(bytestream)
        if pdu is None or pdu.user_information is None:
            reject_assoc_rsd = (0x01, 0x02, 0x01)
        else:
            self._log_pdu(pdu, sent=False)
            if pdu.protocol_version != PROTOCOL_VERSION:
                LOGGER.error(f"Unsupported protocol version '{pdu.protocol_version}'")
                reject_assoc_rsd = (0x01, 0x02, 0x02)
            elif pdu.application_context_name != APPLICATION_CONTEXT_NAME:
                LOGGER.error(
                    "Unsupported application context name "
                    f"'{pdu.application_context_name}'"
                )
                reject_assoc_rsd = (0x01, 0x01, 0x02)
            elif not _is_valid_ae(pdu.calling_ae_title, "Calling AE Title"):
                reject_assoc_rsd = (0x01, 0x01, 0x03)
            elif not _is_valid_ae(pdu.called_ae_title, "Called AE Title"):
                reject_assoc_rsd = (0x01, 0x01, 0x07)
            elif self.require_called_aet and pdu.called_ae_title != self.ae_title:
                LOGGER.error(
                    f"The called AE title '{pdu.called_ae_title}' doesn't match "
                    f"'{self.ae_title}'"
                )
                reject_assoc_rsd = (0x01, 0x01, 0x07)

        if reject_assoc_rsd:
            LOGGER.info("Rejecting Association")
            return self.serialize_associate_reject(*reject_assoc_rsd)

        pdu = cast(A_ASSOCIATE_RQ, pdu)
        results = negotiate_as_acceptor(pdu.presentation_context, self.supported_contexts)

        LOGGER.info("Accepting Association")
        return self._serialize_accept(
            {cast(int, cx.context_id): cx for cx in results},
            pdu.calling_ae_title,
            pdu.called_ae_title,
            requested=pdu.presentation_context,
        )

    def serialize_associate_accept(
        self,
        chosen_by_context_id: Mapping[int, _ChosenType],
        calling_ae_title: str,
        called_ae_title: str | None = None,
    ) -> bytes:
        """Return an encoded A-ASSOCIATE-AC PDU.

        Parameters
        ----------
        chosen_by_context_id : dict
            The reply to each of the proposed presentation contexts, indexed
            by context ID. The value is one of:

            * :class:`str` or :class:`~pydicom.uid.UID`: the context is
              accepted with the value as the transfer syntax
            * ``None``: the context is rejected as none of the transfer
              syntaxes are supported (``0x04``)
            * :class:`~pyassoc.presentation.PresentationContext`: its
              *Result* and accepted transfer syntax are used
        calling_ae_title : str
            The *Calling AE Title* received in the A-ASSOCIATE-RQ.
        called_ae_title : str, optional
            The *Called AE Title* received in the A-ASSOCIATE-RQ, defaults to
            the local AE title.

        Returns
        -------
        bytes
            The encoded A-ASSOCIATE-AC.
        """
        return self._serialize_accept(
            chosen_by_context_id, calling_ae_title, called_ae_title
        )

    def _serialize_accept(
        self,
        chosen_by_context_id: Mapping[int, _ChosenType],
        calling_ae_title: str,
        called_ae_title: str | None = None,
        requested: Sequence[PresentationContext] = (),
    ) -> bytes:
        contexts = []
        for context_id in sorted(chosen_by_context_id):
            chosen = chosen_by_context_id[context_id]
            if isinstance(chosen, PresentationContext):
                result = chosen.result
                if result is None:
                    result = (
                        RESULT_ACCEPTANCE
                        if chosen.accepted_transfer_syntax
                        else RESULT_TRANSFER_SYNTAX_NOT_SUPPORTED
                    )

                accepted = None
                if result == RESULT_ACCEPTANCE:
                    accepted = chosen.accepted_transfer_syntax

                context = PresentationContext(
                    context_id=context_id,
                    accepted_transfer_syntax=accepted,
                    result=result,
                    validate=False,
                )
            elif chosen is None:
                context = PresentationContext(
                    context_id=context_id, result=RESULT_TRANSFER_SYNTAX_NOT_SUPPORTED
                )
            else:
                context = PresentationContext(
                    context_id=context_id,
                    accepted_transfer_syntax=chosen,
                    result=RESULT_ACCEPTANCE,
                )

            contexts.append(context)

        pdu = A_ASSOCIATE_AC(
            called_ae_title=called_ae_title or self.ae_title,
            calling_ae_title=calling_ae_title,
            presentation_context=contexts,
            user_information=self._user_information,
        )
        self._log_pdu(pdu, sent=True, requested=requested)

        return pdu.encode()

    def serialize_associate_reject(self, result: int, source: int, diagnostic: int) -> bytes:
        """Return an encoded A-ASSOCIATE-RJ PDU.

        Parameters
        ----------
        result : int
            The association rejection:

            - ``0x01`` - rejected permanent
            - ``0x02`` - rejected transient
        source : int
            The source of the rejection:

            - ``0x01`` - DUL service user
            - ``0x02`` - DUL service provider (ACSE related)
            - ``0x03`` - DUL service provider (presentation related)
        diagnostic : int
            The reason for the rejection, if the `source` is ``0x01``:

            - ``0x01`` - no reason given
            - ``0x02`` - application context name not supported
            - ``0x03`` - calling AE title not recognised
            - ``0x07`` - called AE title not recognised

            If the `source` is ``0x02``:

            - ``0x01`` - no reason given
            - ``0x02`` - protocol version not supported

            If the `source` is ``0x03``:

            - ``0x01`` - temporary congestion
            - ``0x02`` - local limit exceeded

        Returns
        -------
        bytes
            The encoded A-ASSOCIATE-RJ.
        """
        if result not in [0x01, 0x02]:
            LOGGER.error("Invalid 'result' parameter value")
            raise ValueError("Invalid 'result' parameter value")

        _valid_reason_diagnostic = {
            0x01: [0x01, 0x02, 0x03, 0x07],
            0x02: [0x01, 0x02],
            0x03: [0x01, 0x02],
        }

        try:
            if diagnostic not in _valid_reason_diagnostic[source]:
                LOGGER.error("Invalid 'diagnostic' parameter value")
                raise ValueError("Invalid 'diagnostic' parameter value")
        except KeyError:
            LOGGER.error("Invalid 'source' parameter value")
            raise ValueError("Invalid 'source' parameter value")

        pdu = A_ASSOCIATE_RJ(result, source, diagnostic)
        self._log_pdu(pdu, sent=True)

        return pdu.encode()

    def serialize_associate_request(
        self,
        contexts: Sequence[_ProposedType],
        called_ae_title: str = "ANY-SCP",
    ) -> bytes:
        """Return an encoded A-ASSOCIATE-RQ PDU.

        Parameters
        ----------
        contexts : list
            The presentation contexts to propose, either as
            :class:`~pyassoc.presentation.PresentationContext` or as
            ``(abstract syntax, [transfer syntax, ...])`` pairs, where a single
            transfer syntax may be used instead of the list. Contexts
            without a context ID are given one based on their position in
            the list, as 1, 3, 5, etc.
        called_ae_title : str, optional
            The AE title of the peer (default ``"ANY-SCP"``).

        Returns
        -------
        bytes
            The encoded A-ASSOCIATE-RQ.
        """
        if not contexts:
            msg = "At least one presentation context must be proposed"
            LOGGER.error(msg)
            raise ValueError(msg)

        if len(contexts) > 128:
            msg = "No more than 128 presentation contexts may be proposed"
            LOGGER.error(msg)
            raise ValueError(msg)

        requested = []
        for ii, cx in enumerate(contexts):
            if isinstance(cx, PresentationContext):
                if cx.context_id is None:
                    cx = PresentationContext(
                        context_id=2 * ii + 1,
                        abstract_syntax=cx.abstract_syntax,
                        transfer_syntax=cx.transfer_syntax,
                        validate=False,
                    )
            else:
                abstract_syntax, transfer_syntax = cx
                cx = build_context(abstract_syntax, transfer_syntax, 2 * ii + 1)

            requested.append(cx)

        context_ids = [cx.context_id for cx in requested]
        if len(set(context_ids)) != len(context_ids):
            msg = "The presentation context IDs must be unique"
            LOGGER.error(msg)
            raise ValueError(msg)

        pdu = A_ASSOCIATE_RQ(
            called_ae_title=called_ae_title,
            calling_ae_title=self.ae_title,
            presentation_context=requested,
            user_information=self._user_information,
        )
        self.requested_contexts = requested
        self._log_pdu(pdu, sent=True)

        return pdu.encode()

    @property
    def user_information(self) -> UserInformationItem:
        """Return the User Information sent to the peer."""
        return self._user_information


def _is_valid_ae(value: str, name: str) -> bool:
    """Return ``True`` if the AE title received from the peer can be sent
    back in the A-ASSOCIATE-AC.
    """
    try:
        set_ae(value, name, False, False)
    except ValueError:
        return False

    return True
