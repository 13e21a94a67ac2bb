"""Implementation of the A-ASSOCIATE PDUs.

The association negotiation PDUs are:

* A-ASSOCIATE-RQ: sent by the *Requestor* to propose an association
* A-ASSOCIATE-AC: sent by the *Acceptor* to accept it
* A-ASSOCIATE-RJ: sent by the *Acceptor* to reject it
"""

import logging
from struct import error as StructError
from typing import Any, Callable, Sequence, TypeVar, Union, cast

from pydicom.uid import UID

from pyassoc._globals import (
    A_ASSOCIATE_AC_TYPE,
    A_ASSOCIATE_RJ_TYPE,
    A_ASSOCIATE_RQ_TYPE,
    APPLICATION_CONTEXT_ITEM,
    APPLICATION_CONTEXT_NAME,
    PRESENTATION_CONTEXT_AC_ITEM,
    PRESENTATION_CONTEXT_RQ_ITEM,
    PROTOCOL_VERSION,
    USER_INFORMATION_ITEM,
)
from pyassoc.codec import (
    PACK_UCHAR,
    PACK_UINT2,
    PACK_UINT4,
    UNPACK_UCHAR,
    UNPACK_UINT2,
    read_uint8,
    read_uint32,
)
from pyassoc.exceptions import MalformedPDUError
from pyassoc.pdu_items import ApplicationContextItem, PDUItem, UserInformationItem
from pyassoc.presentation import PresentationContext
from pyassoc.utils import decode_bytes, pretty_bytes, set_ae


LOGGER = logging.getLogger(__name__)

_PDUType = TypeVar("_PDUType", bound="PDU")
_VariableItem = Union[ApplicationContextItem, PresentationContext, UserInformationItem]


class PDU:
    """Base class for PDUs.

    Protocol Data Units (PDUs) are the message formats exchanged between peer
    entities within a layer. A PDU consists of protocol control information
    and user data. PDUs are constructed by mandatory fixed fields followed by
    optional variable fields that contain one or more items and/or sub-items.

    References
    ----------
    DICOM Standard, Part 8, :dcm:`Section 9.3 <part08/sect_9.3.html>`
    """

    # The minimum length of an encoded PDU of this type
    _minimum_length = 6

    # Values decoded from a peer aren't validated
    _skip_validation: bool = False

    @classmethod
    def decode(cls: type[_PDUType], bytestream: bytes) -> _PDUType | None:
        """Return a PDU decoded from `bytestream`.

        The *PDU Length* is only trusted as far as the actual length of
        `bytestream`.

        Parameters
        ----------
        bytestream : bytes
            The encoded PDU, starting with the *PDU Type* field.

        Returns
        -------
        PDU or None
            The decoded PDU, or ``None`` if `bytestream` is for a different
            type of PDU or is malformed.
        """
        try:
            pdu_type = read_uint8(bytestream, 0)
            if pdu_type != PDU_TYPES[cls]:
                raise MalformedPDUError(
                    f"Expected a PDU type of 0x{PDU_TYPES[cls]:02X}, got "
                    f"0x{pdu_type:02X}"
                )

            pdu_length = read_uint32(bytestream, 2)
            bytestream = bytestream[: 6 + pdu_length]
            if len(bytestream) < cls._minimum_length:
                raise MalformedPDUError(
                    f"Only {len(bytestream)} bytes available, at least "
                    f"{cls._minimum_length} are required"
                )

            pdu = cls()
            pdu._skip_validation = True
            pdu._decode_fields(bytestream)
        except MalformedPDUError as exc:
            LOGGER.error(f"Unable to decode the {cls.__name__.replace('_', '-')} PDU: {exc}")
            for line in pretty_bytes(bytestream):
                LOGGER.debug(line)

            return None

        return pdu

    def _decode_fields(self, bytestream: bytes) -> None:
        """Decode `bytestream` and use the result to set the field values of
        the PDU.
        """
        for (offset, length), attr_name, func, args in self._decoders:
            # Allow us to use None as a `length`
            if length:
                sl = slice(offset, offset + length)
            else:
                sl = slice(offset, None)

            try:
                setattr(self, attr_name, func(bytestream[sl], *args))
            except (StructError, ValueError) as exc:
                raise MalformedPDUError(
                    f"Unable to decode the '{attr_name}' field: {exc}"
                ) from exc

    @property
    def _decoders(self) -> Any:
        """Return an iterable of tuples that contain field decoders.

        Returns
        -------
        list of tuple
            A list of ``((offset, length), attr_name, callable, [args])``,
            where:

            - ``offset`` is the byte offset to start at
            - ``length`` is how many bytes to slice (if None then will slice
              to the end of the data),
            - ``attr_name`` is the name of the attribute corresponding to the
              field
            - ``callable`` is a decoding function that returns the decoded
              value
            - ``args`` is a list of arguments to pass ``callable``
        """
        raise NotImplementedError

    def encode(self) -> bytes:
        """Return the encoded PDU as :class:`bytes`."""
        bytestream = bytes()
        for attr_name, func, args in self._encoders:
            # If attr_name is None then the field is usually reserved
            if attr_name:
                bytestream += func(getattr(self, attr_name), *args)
            else:
                bytestream += func(*args)

        return bytestream

    @property
    def _encoders(self) -> Any:
        """Return an iterable of tuples that contain field encoders.

        Returns
        -------
        list of tuple
            A list of ``(attr_name, callable, [args])``, where:

            - ``attr_name`` is the name of the attribute corresponding to the
              field
            - ``callable`` is an encoding function that returns :class:`bytes`
            - ``args`` is a :class:`list` of arguments to pass ``callable``.
        """
        raise NotImplementedError

    def __eq__(self, other: Any) -> bool:
        """Return ``True`` if `self` equals `other`."""
        if other is self:
            return True

        # pdu_type may not be in self._encoders
        if isinstance(other, type(self)):
            self_dict = {
                enc[0]: getattr(self, enc[0]) for enc in self._encoders if enc[0]
            }
            other_dict = {
                enc[0]: getattr(other, enc[0]) for enc in other._encoders if enc[0]
            }

            return self_dict == other_dict

        return NotImplemented

    def __len__(self) -> int:
        """Return the total length of the encoded PDU as :class:`int`."""
        return 6 + self.pdu_length

    def __ne__(self, other: Any) -> bool:
        """Return ``True`` if `self` does not equal `other`."""
        return not self == other

    @property
    def pdu_length(self) -> int:
        """Return the *PDU Length* field value as :class:`int`."""
        raise NotImplementedError

    @property
    def pdu_type(self) -> int:
        """Return the *PDU Type* field value as :class:`int`."""
        return PDU_TYPES[self.__class__]

    @staticmethod
    def _wrap_bytes(bytestream: bytes) -> bytes:
        """Return `bytestream` without changing it."""
        return bytestream

    @staticmethod
    def _wrap_encode_str(value: str, pad: int = 0) -> bytes:
        """Return `value` as ASCII encoded :class:`bytes`, padded with
        trailing spaces to `pad` characters.

        References
        ----------
        * DICOM Standard, Part 8, :dcm:`Annex F <part08/chapter_F.html>`
        """
        return value.ljust(pad).encode("ascii", errors="strict")

    @staticmethod
    def _wrap_pack(value: Any, packer: Callable[[Any], bytes]) -> bytes:
        """Return `value` encoded as bytes using `packer`.

        Parameters
        ----------
        value
            The value to encode.
        packer : callable
            A callable function to use to pack the data as bytes. The
            `packer` should return the packed bytes. Example:
            struct.Struct('>I').pack
        """
        return packer(value)

    @staticmethod
    def _wrap_unpack(bytestream: bytes, unpacker: Callable[[bytes], tuple[Any]]) -> Any:
        """Return the first value when `unpacker` is run on `bytestream`."""
        return unpacker(bytestream)[0]


class _AssociatePDU(PDU):
    """Base class for the A-ASSOCIATE-RQ and A-ASSOCIATE-AC PDUs, which share
    the same structure.

    **Encoding**

    +--------+-------------+-------------------------+
    | Offset | Length      | Description             |
    +========+=============+=========================+
    | 0      | 1           | PDU type                |
    +--------+-------------+-------------------------+
    | 1      | 1           | Reserved                |
    +--------+-------------+-------------------------+
    | 2      | 4           | PDU length              |
    +--------+-------------+-------------------------+
    | 6      | 2           | Protocol version        |
    +--------+-------------+-------------------------+
    | 8      | 2           | Reserved                |
    +--------+-------------+-------------------------+
    | 10     | 16          | Called AE title         |
    +--------+-------------+-------------------------+
    | 26     | 16          | Calling AE title        |
    +--------+-------------+-------------------------+
    | 42     | 32          | Reserved                |
    +--------+-------------+-------------------------+
    | 74     | Variable    | Variable items          |
    +--------+-------------+-------------------------+
    """

    _minimum_length = 74

    def __init__(
        self,
        called_ae_title: str | bytes = "ANY-SCP",
        calling_ae_title: str | bytes = "PYASSOC",
        presentation_context: Sequence[PresentationContext] | None = None,
        user_information: UserInformationItem | None = None,
        application_context_name: str | UID = APPLICATION_CONTEXT_NAME,
        protocol_version: int = PROTOCOL_VERSION,
    ) -> None:
        self.protocol_version = protocol_version
        self.called_ae_title = called_ae_title
        self.calling_ae_title = calling_ae_title

        self.variable_items: list[_VariableItem] = [
            ApplicationContextItem(application_context_name)
        ]
        self.variable_items.extend(presentation_context or [])
        if user_information is not None:
            self.variable_items.append(user_information)

    @property
    def application_context_name(self) -> UID | None:
        """Return the *Application Context Name*, if available."""
        for item in self.variable_items:
            if isinstance(item, ApplicationContextItem):
                return item.application_context_name

        return None

    def _set_ae(self, value: str | bytes | None, name: str) -> str:
        if self._skip_validation:
            # PS3.8 Table 9-11: Leading and trailing spaces are non-significant
            if isinstance(value, bytes):
                value = decode_bytes(value)

            return cast(str, value).strip()

        return cast(str, set_ae(value, name, False, False))

    @property
    def called_ae_title(self) -> str:
        """Get or set the *Called AE Title* field value as :class:`str`.

        Will be encoded as a fixed length 16-byte value (padded with trailing
        spaces ``0x20``). Leading and trailing spaces are non-significant and a
        value of 16 spaces is not allowed.
        """
        return self._called_aet

    @called_ae_title.setter
    def called_ae_title(self, value: str | bytes | None) -> None:
        self._called_aet = self._set_ae(value, "Called AE Title")

    @property
    def calling_ae_title(self) -> str:
        """Get or set the *Calling AE Title* field value as :class:`str`."""
        return self._calling_aet

    @calling_ae_title.setter
    def calling_ae_title(self, value: str | bytes | None) -> None:
        self._calling_aet = self._set_ae(value, "Calling AE Title")

    @property
    def _decoders(self) -> Any:
        return [
            ((6, 2), "protocol_version", self._wrap_unpack, [UNPACK_UINT2]),
            ((10, 16), "called_ae_title", self._wrap_bytes, []),
            ((26, 16), "calling_ae_title", self._wrap_bytes, []),
            ((74, None), "variable_items", self._wrap_generate_items, []),
        ]

    @property
    def _encoders(self) -> Any:
        return [
            ("pdu_type", PACK_UCHAR, []),
            (None, self._wrap_pack, [0x00, PACK_UCHAR]),
            ("pdu_length", PACK_UINT4, []),
            ("protocol_version", PACK_UINT2, []),
            (None, self._wrap_pack, [0x0000, PACK_UINT2]),
            ("called_ae_title", self._wrap_encode_str, [16]),
            ("calling_ae_title", self._wrap_encode_str, [16]),
            (None, self._wrap_bytes, [b"\x00" * 32]),
            ("variable_items", self._wrap_encode_items, []),
        ]

    @staticmethod
    def _wrap_encode_items(items: list[_VariableItem]) -> bytes:
        """Return `items` encoded as bytes."""
        return b"".join(item.encode() for item in items)

    def _wrap_generate_items(self, bytestream: bytes) -> list[_VariableItem]:
        """Return a list of the variable items decoded from `bytestream`.

        Presentation Context and User Information items that can't be
        decoded are skipped, as are items of an unknown type.
        """
        item_list: list[_VariableItem] = []
        for item_type, item_bytes in PDUItem._generate_items(bytestream):
            if item_type == APPLICATION_CONTEXT_ITEM:
                item = ApplicationContextItem()
                item.decode(item_bytes)
                item_list.append(item)
            elif item_type in (PRESENTATION_CONTEXT_RQ_ITEM, PRESENTATION_CONTEXT_AC_ITEM):
                context = PresentationContext.decode(item_bytes)
                if context is None:
                    LOGGER.warning("Skipping an undecodable Presentation Context item")
                    continue

                item_list.append(context)
            elif item_type == USER_INFORMATION_ITEM:
                user_info = UserInformationItem.decode(item_bytes)
                if user_info is not None:
                    item_list.append(user_info)
            else:
                LOGGER.warning(f"Skipping unknown PDU item type 0x{item_type:02X}")

        return item_list

    @property
    def pdu_length(self) -> int:
        """Return the *PDU Length* field value as :class:`int`."""
        return 68 + len(self._wrap_encode_items(self.variable_items))

    @property
    def presentation_context(self) -> list[PresentationContext]:
        """Return a list of the Presentation Context items."""
        return [
            item for item in self.variable_items if isinstance(item, PresentationContext)
        ]

    def __str__(self) -> str:
        """Return a string representation of the PDU."""
        title = f"{self.__class__.__name__.replace('_', '-')} PDU"
        s = [title]
        s.append("=" * len(title))
        s.append(f"  PDU type: 0x{self.pdu_type:02X}")
        s.append(f"  PDU length: {self.pdu_length} bytes")
        s.append(f"  Protocol version: {self.protocol_version}")
        s.append(f"  Called AET:  {self.called_ae_title}")
        s.append(f"  Calling AET: {self.calling_ae_title}")
        s.append("")

        s.append("  Variable Items")
        s.append("  ---------------")
        s.append("  * Application Context Item")
        s.append(f"    - Context name: ={self.application_context_name}")
        s.append("  * Presentation Context Item(s):")

        for cx in self.presentation_context:
            item_str_list = str(cx).split("\n")
            s.append(f"    - {item_str_list[0]}")
            for jj in item_str_list[1:]:
                s.append(f"      {jj}")

        user_info = self.user_information
        if user_info is not None:
            s.append("  * User Information Item(s):")
            for item in user_info.user_data:
                item_str_list = str(item).rstrip("\n").split("\n")
                s.append(f"    - {item_str_list[0]}")
                for jj in item_str_list[1:]:
                    s.append(f"      {jj}")

        return "\n".join(s)

    @property
    def user_information(self) -> UserInformationItem | None:
        """Return the User Information Item, if available."""
        for item in self.variable_items:
            if isinstance(item, UserInformationItem):
                return item

        return None


class A_ASSOCIATE_RQ(_AssociatePDU):
    """An A-ASSOCIATE-RQ PDU.

    An A-ASSOCIATE-RQ PDU is sent by an association requestor to initiate
    association negotiation with an acceptor.

    Attributes
    ----------
    called_ae_title : str
        The *Called AE Title* field value, the destination DICOM application
        name (1 to 16 characters).
    calling_ae_title : str
        The *Calling AE Title* field value, the source DICOM application name.
    protocol_version : int
        The *Protocol Version* field value (``0x01``).
    variable_items : list
        A list containing the A-ASSOCIATE-RQ's *Variable Items*. Contains
        one Application Context item, one or more Presentation Context (RQ)
        items and one User Information item. The order of the items is not
        guaranteed.

    References
    ----------
    * DICOM Standard, Part 8, :dcm:`Section 9.3.2 <part08/sect_9.3.2.html>`
    """


class A_ASSOCIATE_AC(_AssociatePDU):
    """An A-ASSOCIATE-AC PDU.

    An A-ASSOCIATE-AC PDU is sent by an association acceptor to indicate that
    association negotiation has been successful.

    The *Called AE Title* and *Calling AE Title* fields are reserved and
    should contain the values received in the A-ASSOCIATE-RQ, however they
    are not tested when received.

    References
    ----------
    * DICOM Standard, Part 8, :dcm:`Section 9.3.3 <part08/sect_9.3.3.html>`
    """


class A_ASSOCIATE_RJ(PDU):
    """An A-ASSOCIATE-RJ PDU.

    An A-ASSOCIATE-RJ PDU is sent by an association acceptor to indicate that
    association negotiation has been unsuccessful.

    **Encoding**

    +--------+-------------+-------------------+
    | Offset | Length      | Description       |
    +========+=============+===================+
    | 0      | 1           | PDU type          |
    +--------+-------------+-------------------+
    | 1      | 1           | Reserved          |
    +--------+-------------+-------------------+
    | 2      | 4           | PDU length        |
    +--------+-------------+-------------------+
    | 6      | 1           | Reserved          |
    +--------+-------------+-------------------+
    | 7      | 1           | Result            |
    +--------+-------------+-------------------+
    | 8      | 1           | Source            |
    +--------+-------------+-------------------+
    | 9      | 1           | Reason/diagnostic |
    +--------+-------------+-------------------+

    References
    ----------
    * DICOM Standard, Part 8,
      :dcm:`Section 9.3.4 <part08/sect_9.3.4.html>`
    """

    _minimum_length = 10

    def __init__(
        self,
        result: int | None = None,
        source: int | None = None,
        reason_diagnostic: int | None = None,
    ) -> None:
        self.result = result
        self.source = source
        self.reason_diagnostic = reason_diagnostic

    @property
    def _decoders(self) -> Any:
        return [
            ((7, 1), "result", self._wrap_unpack, [UNPACK_UCHAR]),
            ((8, 1), "source", self._wrap_unpack, [UNPACK_UCHAR]),
            ((9, 1), "reason_diagnostic", self._wrap_unpack, [UNPACK_UCHAR]),
        ]

    @property
    def _encoders(self) -> Any:
        return [
            ("pdu_type", PACK_UCHAR, []),
            (None, self._wrap_pack, [0x00, PACK_UCHAR]),
            ("pdu_length", PACK_UINT4, []),
            (None, self._wrap_pack, [0x00, PACK_UCHAR]),
            ("result", PACK_UCHAR, []),
            ("source", PACK_UCHAR, []),
            ("reason_diagnostic", PACK_UCHAR, []),
        ]

    @property
    def pdu_length(self) -> int:
        """Return the *PDU Length* field value as an int."""
        return 4

    @property
    def reason_str(self) -> str:
        """Return a str describing the *Reason/Diagnostic* field value."""
        if self.source not in _REASONS:
            msg = "Invalid value in Source field in A-ASSOCIATE-RJ PDU"
            LOGGER.error(msg)
            raise ValueError(msg)

        source = cast(int, self.source)
        if self.reason_diagnostic not in _REASONS[source]:
            msg = "Invalid value in Reason field in A-ASSOCIATE-RJ PDU"
            LOGGER.error(msg)
            raise ValueError(msg)

        return _REASONS[source][cast(int, self.reason_diagnostic)]

    @property
    def result_str(self) -> str:
        """Return a str describing the *Result* field value."""
        _results = {1: "Rejected (Permanent)", 2: "Rejected (Transient)"}

        if self.result not in _results:
            msg = "Invalid value in Result field in A-ASSOCIATE-RJ PDU"
            LOGGER.error(msg)
            raise ValueError(msg)

        return _results[cast(int, self.result)]

    @property
    def source_str(self) -> str:
        """Return a str describing the *Source* field value."""
        _sources = {
            1: "DUL service-user",
            2: "DUL service-provider (ACSE related)",
            3: "DUL service-provider (presentation related)",
        }

        if self.source not in _sources:
            msg = "Invalid value in Source field in A-ASSOCIATE-RJ PDU"
            LOGGER.error(msg)
            raise ValueError(msg)

        return _sources[cast(int, self.source)]

    def __str__(self) -> str:
        """Return a string representation of the PDU."""
        s = "A-ASSOCIATE-RJ PDU\n"
        s += "==================\n"
        s += f"  PDU type: 0x{self.pdu_type:02X}\n"
        s += f"  PDU length: {self.pdu_length} bytes\n"
        s += f"  Result: {self.result_str}\n"
        s += f"  Source: {self.source_str}\n"
        s += f"  Reason/Diagnostic: {self.reason_str}\n"

        return s


# PS3.8 Table 9-21, indexed by source then reason/diagnostic
_REASONS = {
    1: {
        1: "No reason given",
        2: "Application context name not supported",
        3: "Calling AE title not recognised",
        4: "Reserved",
        5: "Reserved",
        6: "Reserved",
        7: "Called AE title not recognised",
        8: "Reserved",
        9: "Reserved",
        10: "Reserved",
    },
    2: {1: "No reason given", 2: "Protocol version not supported"},
    3: {
        0: "Reserved",
        1: "Temporary congestion",
        2: "Local limit exceeded",
        3: "Reserved",
        4: "Reserved",
        5: "Reserved",
        6: "Reserved",
        7: "Reserved",
    },
}


# PDUs indexed by their class
PDU_TYPES = {
    A_ASSOCIATE_RQ: A_ASSOCIATE_RQ_TYPE,
    A_ASSOCIATE_AC: A_ASSOCIATE_AC_TYPE,
    A_ASSOCIATE_RJ: A_ASSOCIATE_RJ_TYPE,
}
