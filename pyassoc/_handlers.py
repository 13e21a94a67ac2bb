"""Standard logging handlers for the A-ASSOCIATE PDUs."""

import logging
from typing import Callable, Sequence, cast

from pydicom.uid import UID

from pyassoc.pdu import PDU, A_ASSOCIATE_AC, A_ASSOCIATE_RJ, A_ASSOCIATE_RQ
from pyassoc.pdu_items import UserInformationItem
from pyassoc.presentation import PresentationContext


LOGGER = logging.getLogger(__name__)

_Handler = Callable[[PDU, Sequence[PresentationContext]], list[str]]


def standard_pdu_recv_handler(
    pdu: PDU, requested: Sequence[PresentationContext] = ()
) -> list[str]:
    """Standard handler when a PDU is received and decoded.

    Parameters
    ----------
    pdu : pdu.PDU
        The decoded A-ASSOCIATE-RQ, A-ASSOCIATE-AC or A-ASSOCIATE-RJ PDU.
    requested : list of presentation.PresentationContext, optional
        For an A-ASSOCIATE-AC, the contexts that were proposed, used to add
        the abstract syntax to the summary.

    Returns
    -------
    list of str
        The summary lines, which have also been logged at the ``DEBUG`` level.
    """
    handlers: dict[type, _Handler] = {
        A_ASSOCIATE_AC: _receive_associate_ac,
        A_ASSOCIATE_RJ: _receive_associate_rj,
        A_ASSOCIATE_RQ: _receive_associate_rq,
    }
    return handlers[type(pdu)](pdu, requested)


def standard_pdu_sent_handler(
    pdu: PDU, requested: Sequence[PresentationContext] = ()
) -> list[str]:
    """Standard handler when a PDU is encoded and sent.

    Parameters
    ----------
    pdu : pdu.PDU
        The A-ASSOCIATE-RQ, A-ASSOCIATE-AC or A-ASSOCIATE-RJ PDU being sent.
    requested : list of presentation.PresentationContext, optional
        For an A-ASSOCIATE-AC, the contexts proposed by the peer.

    Returns
    -------
    list of str
        The summary lines, which have also been logged at the ``DEBUG`` level.
    """
    handlers: dict[type, _Handler] = {
        A_ASSOCIATE_AC: _send_associate_ac,
        A_ASSOCIATE_RJ: _send_associate_rj,
        A_ASSOCIATE_RQ: _send_associate_rq,
    }
    return handlers[type(pdu)](pdu, requested)


def _log(s: list[str]) -> list[str]:
    for line in s:
        LOGGER.debug(line)

    return s


def _result_lines(
    pdu: A_ASSOCIATE_AC, requested: Sequence[PresentationContext]
) -> list[str]:
    """Return the summary lines for the A-ASSOCIATE-AC's contexts."""
    req_contexts = {cx.context_id: cx for cx in requested}
    s = ["Presentation Contexts:"]
    for cx in sorted(pdu.presentation_context, key=lambda x: cast(int, x.context_id)):
        s.append(f"  Context ID:        {cx.context_id} ({cx.status})")
        # Grab the abstract syntax from the requestor
        a_syntax = getattr(req_contexts.get(cx.context_id), "abstract_syntax", None)
        if a_syntax is not None:
            s.append(f"    Abstract Syntax: ={a_syntax.name}")

        if cx.result == 0 and cx.transfer_syntax:
            s.append(f"    Accepted Transfer Syntax: ={cx.transfer_syntax[0].name}")

    return s


def _proposed_lines(pres_contexts: Sequence[PresentationContext]) -> list[str]:
    """Return the summary lines for the A-ASSOCIATE-RQ's contexts."""
    s = []
    if len(pres_contexts) == 1:
        s.append("Presentation Context:")
    else:
        s.append("Presentation Contexts:")

    for context in pres_contexts:
        s.append(f"  Context ID:        {context.context_id} (Proposed)")
        if context.abstract_syntax is not None:
            s.append(f"    Abstract Syntax: ={context.abstract_syntax.name}")

        # Transfer Syntaxes
        if len(context.transfer_syntax) == 1:
            s.append("    Proposed Transfer Syntax:")
        else:
            s.append("    Proposed Transfer Syntaxes:")
        s.extend([f"      ={ts.name}" for ts in context.transfer_syntax])

    return s


def _receive_associate_ac(
    pdu: PDU, requested: Sequence[PresentationContext]
) -> list[str]:
    """Standard logging handler for receiving an A-ASSOCIATE-AC PDU."""
    assoc_ac = cast(A_ASSOCIATE_AC, pdu)
    user_info = assoc_ac.user_information

    their_class_uid: str | UID = "unknown"
    their_version = "unknown"
    max_length: int | str = "unknown"
    if user_info is not None:
        their_class_uid = user_info.implementation_class_uid or their_class_uid
        their_version = user_info.implementation_version_name or their_version
        max_length = user_info.maximum_length

    s = [
        "Accept Parameters:",
        f"{' INCOMING A-ASSOCIATE-AC PDU ':=^76}",
        f"Their Implementation Class UID:    {their_class_uid}",
        f"Their Implementation Version Name: {their_version}",
        f"Application Context Name:    {assoc_ac.application_context_name}",
        f"Calling Application Name:    {assoc_ac.calling_ae_title}",
        f"Called Application Name:     {assoc_ac.called_ae_title}",
        f"Their Max PDU Receive Size:  {max_length}",
    ]
    s.extend(_result_lines(assoc_ac, requested))
    s.append(f"{' END A-ASSOCIATE-AC PDU ':=^76}")

    return _log(s)


def _receive_associate_rj(
    pdu: PDU, requested: Sequence[PresentationContext]
) -> list[str]:
    """Standard logging handler for receiving an A-ASSOCIATE-RJ PDU."""
    assoc_rj = cast(A_ASSOCIATE_RJ, pdu)
    return _log(_reject_lines(assoc_rj, "INCOMING"))


def _receive_associate_rq(
    pdu: PDU, requested: Sequence[PresentationContext]
) -> list[str]:
    """Standard logging handler for receiving an A-ASSOCIATE-RQ PDU."""
    assoc_rq = cast(A_ASSOCIATE_RQ, pdu)
    pres_contexts = sorted(
        assoc_rq.presentation_context, key=lambda x: cast(int, x.context_id)
    )
    user_info = assoc_rq.user_information

    their_class_uid: str | UID = "unknown"
    their_version = "unknown"
    max_length: int | str = "unknown"
    if user_info is not None:
        their_class_uid = user_info.implementation_class_uid or their_class_uid
        their_version = user_info.implementation_version_name or their_version
        max_length = user_info.maximum_length

    s = [
        "Request Parameters:",
        f"{' INCOMING A-ASSOCIATE-RQ PDU ':=^76}",
        f"Their Implementation Class UID:      {their_class_uid}",
        f"Their Implementation Version Name:   {their_version}",
        f"Application Context Name:    {assoc_rq.application_context_name}",
        f"Calling Application Name:    {assoc_rq.calling_ae_title}",
        f"Called Application Name:     {assoc_rq.called_ae_title}",
        f"Their Max PDU Receive Size:  {max_length}",
    ]
    s.extend(_proposed_lines(pres_contexts))
    s.append(f"{' END A-ASSOCIATE-RQ PDU ':=^76}")

    return _log(s)


def _reject_lines(assoc_rj: A_ASSOCIATE_RJ, direction: str) -> list[str]:
    return [
        "Reject Parameters:",
        f"{f' {direction} A-ASSOCIATE-RJ PDU ':=^76}",
        f"Result:    {assoc_rj.result_str}",
        f"Source:    {assoc_rj.source_str}",
        f"Reason:    {assoc_rj.reason_str}",
        f"{' END A-ASSOCIATE-RJ PDU ':=^76}",
    ]


def _send_associate_ac(
    pdu: PDU, requested: Sequence[PresentationContext]
) -> list[str]:
    """Standard logging handler for sending an A-ASSOCIATE-AC PDU."""
    assoc_ac = cast(A_ASSOCIATE_AC, pdu)
    user_info = cast(UserInformationItem, assoc_ac.user_information)

    s = [
        "Accept Parameters:",
        f"{' OUTGOING A-ASSOCIATE-AC PDU ':=^76}",
        f"Our Implementation Class UID:      {user_info.implementation_class_uid}",
    ]
    if user_info.implementation_version_name:
        version_name = user_info.implementation_version_name
        s.append(f"Our Implementation Version Name:   {version_name}")

    s.append(f"Application Context Name:    {assoc_ac.application_context_name}")
    s.append(f"Responding Application Name: {assoc_ac.called_ae_title}")
    s.append(f"Our Max PDU Receive Size:    {user_info.maximum_length}")
    s.extend(_result_lines(assoc_ac, requested))
    s.append(f"{' END A-ASSOCIATE-AC PDU ':=^76}")

    return _log(s)


def _send_associate_rj(
    pdu: PDU, requested: Sequence[PresentationContext]
) -> list[str]:
    """Standard logging handler for sending an A-ASSOCIATE-RJ PDU."""
    assoc_rj = cast(A_ASSOCIATE_RJ, pdu)
    return _log(_reject_lines(assoc_rj, "OUTGOING"))


def _send_associate_rq(
    pdu: PDU, requested: Sequence[PresentationContext]
) -> list[str]:
    """Standard logging handler for sending an A-ASSOCIATE-RQ PDU."""
    assoc_rq = cast(A_ASSOCIATE_RQ, pdu)
    user_info = cast(UserInformationItem, assoc_rq.user_information)

    s = [
        "Request Parameters:",
        f"{' OUTGOING A-ASSOCIATE-RQ PDU ':=^76}",
        f"Our Implementation Class UID:      {user_info.implementation_class_uid}",
    ]

    if user_info.implementation_version_name:
        version_name = user_info.implementation_version_name
        s.append(f"Our Implementation Version Name:   {version_name}")

    s.append(f"Application Context Name:    {assoc_rq.application_context_name}")
    s.append(f"Calling Application Name:    {assoc_rq.calling_ae_title}")
    s.append(f"Called Application Name:     {assoc_rq.called_ae_title}")
    s.append(f"Our Max PDU Receive Size:    {user_info.maximum_length}")
    s.extend(_proposed_lines(assoc_rq.presentation_context))
    s.append(f"{' END A-ASSOCIATE-RQ PDU ':=^76}")

    return _log(s)
