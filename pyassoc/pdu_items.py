"""DICOM Upper Layer PDU Items and Sub-items.

**A-ASSOCIATE-RQ PDU Items**

- ApplicationContextItem
- Presentation Context Item (see :class:`~pyassoc.presentation.PresentationContext`)

  - AbstractSyntaxSubItem
  - TransferSyntaxSubItem
- UserInformationItem

  - MaximumLengthSubItem
  - ImplementationClassUIDSubItem
  - ImplementationVersionNameSubItem

**A-ASSOCIATE-AC PDU Items**

- ApplicationContextItem
- Presentation Context Item (see :class:`~pyassoc.presentation.PresentationContext`)

  - TransferSyntaxSubItem
- UserInformationItem

  - MaximumLengthSubItem
  - ImplementationClassUIDSubItem
  - ImplementationVersionNameSubItem
"""

import logging
from struct import error as StructError
from typing import Any, Callable, Iterator

from pydicom.uid import UID

from pyassoc._globals import (
    APPLICATION_CONTEXT_NAME,
    DEFAULT_MAX_LENGTH,
    MAXIMUM_MAX_LENGTH,
    PYASSOC_IMPLEMENTATION_UID,
    PYASSOC_IMPLEMENTATION_VERSION,
    APPLICATION_CONTEXT_ITEM,
    ABSTRACT_SYNTAX_SUB_ITEM,
    TRANSFER_SYNTAX_SUB_ITEM,
    USER_INFORMATION_ITEM,
    MAXIMUM_LENGTH_SUB_ITEM,
    IMPLEMENTATION_CLASS_UID_SUB_ITEM,
    IMPLEMENTATION_VERSION_NAME_SUB_ITEM,
    OptionalUIDType,
)
from pyassoc.codec import (
    PACK_UCHAR,
    PACK_UINT2,
    PACK_UINT4,
    UNPACK_UINT4,
    read_uint8,
    read_uint16,
    subrange,
)
from pyassoc.exceptions import MalformedPDUError
from pyassoc.utils import decode_bytes, pretty_bytes, set_ae, set_uid


LOGGER = logging.getLogger(__name__)


class PDUItem:
    """Base class for PDU Items and Sub-items.

    Subclasses describe their fields using :attr:`_decoders` and
    :attr:`_encoders`, the base class takes care of walking them.

    See Also
    --------
    pdu.PDU
    """

    # Values decoded from a peer aren't validated
    _skip_validation: bool = False

    def decode(self, bytestream: bytes) -> None:
        """Decode `bytestream` and use the result to set the field values of
        the PDU item.

        Parameters
        ----------
        bytestream : bytes
            The encoded item, starting with the *Item Type* field.

        Raises
        ------
        pyassoc.exceptions.MalformedPDUError
            If a field can't be decoded.
        """
        self._skip_validation = True
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
                    f"Unable to decode the {self.__class__.__name__}'s "
                    f"'{attr_name}' field: {exc}"
                ) from exc

    @property
    def _decoders(self) -> Any:
        """Return an iterable of tuples that contain field decoders.

        Returns
        -------
        list of tuple
            A list of ((offset, length), attr_name, callable, [args]), where

            - offset is the byte offset to start at
            - length is how many bytes to slice (if None then will slice to the
              end of the data),
            - attr_name is the name of the attribute corresponding to the field
            - callable is a decoding function that returns the decoded value,
            - args is a list of arguments to pass callable.
        """
        raise NotImplementedError

    def encode(self) -> bytes:
        """Return the encoded item as bytes."""
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
            A list of (attr_name, callable, [args]), where

            - attr_name is the name of the attribute corresponding to the field
            - callable is an encoding function that returns bytes
            - args is a list of arguments to pass callable.
        """
        raise NotImplementedError

    def __eq__(self, other: Any) -> bool:
        """Return True if `self` equals `other`."""
        if other is self:
            return True

        if isinstance(other, type(self)):
            # Use the values of the class attributes that get encoded
            self_dict = {en[0]: getattr(self, en[0]) for en in self._encoders if en[0]}
            other_dict = {
                en[0]: getattr(other, en[0]) for en in other._encoders if en[0]
            }
            return self_dict == other_dict

        return NotImplemented

    @staticmethod
    def _generate_items(bytestream: bytes) -> Iterator[tuple[int, bytes]]:
        """Yield the *Item Type* and encoded data of each item in
        `bytestream`.

        Each item has a 4 byte header of *Item Type* (1 byte), a reserved
        byte and the big endian *Item Length* (2 bytes), followed by *Item
        Length* bytes of data. The *Item Length* is never trusted: an item
        that claims to run past the end of `bytestream` is yielded with
        whatever data is available and the iteration stops, as does a
        trailing partial header.

        Parameters
        ----------
        bytestream : bytes
            The encoded PDU variable item data.

        Yields
        ------
        int, bytes
            The item's *Item Type* and the item's entire encoded data.
        """
        offset = 0
        while len(bytestream) - offset >= 4:
            item_type = read_uint8(bytestream, offset)
            item_length = read_uint16(bytestream, offset + 2)
            item_data = bytestream[offset : offset + 4 + item_length]
            yield item_type, item_data

            if len(item_data) != 4 + item_length:
                LOGGER.warning(
                    f"The item with type 0x{item_type:02X} has an item length "
                    f"of {item_length} bytes but only {len(item_data) - 4} "
                    "bytes are available"
                )
                return

            # Move `offset` to the start of the next item
            offset += 4 + item_length

        if offset < len(bytestream):
            LOGGER.warning(
                f"Ignoring {len(bytestream) - offset} trailing byte(s) that are "
                "too short to be an item"
            )

    @property
    def item_length(self) -> int:
        """Return the item's *Item Length* field value as :class:`int`."""
        raise NotImplementedError

    @property
    def item_type(self) -> int:
        """Return the item's *Item Type* field value as :class:`int`."""
        return _TYPE_TO_PDU_ITEM[type(self)]

    def __len__(self) -> int:
        """Return the total length of the encoded item as :class:`int`."""
        return 4 + self.item_length

    def __ne__(self, other: Any) -> bool:
        """Return True if `self` does not equal `other`."""
        return not self == other

    @staticmethod
    def _wrap_uid_bytes(bytestream: bytes) -> bytes:
        """Return `bytestream` without trailing null padding or surrounding
        spaces.
        """
        return bytestream.rstrip(b"\x00").strip()

    @staticmethod
    def _wrap_encode_str(value: str | None) -> bytes:
        """Return `value` as UTF-8 encoded :class:`bytes`.

        UIDs are encoded without a trailing padding byte, even when odd
        length (Part 5, Section 9.1: "...except when used for network
        negotiation...").
        """
        return (value or "").encode("utf-8")

    @staticmethod
    def _wrap_pack(value: Any, packer: Callable[[Any], bytes]) -> bytes:
        """Return `value` encoded as bytes using `packer`."""
        return packer(value)

    @staticmethod
    def _wrap_unpack(bytestream: bytes, unpacker: Callable[[bytes], tuple[Any]]) -> Any:
        """Return the first value when `unpacker` is run on `bytestream`."""
        return unpacker(bytestream)[0]


class _UIDItem(PDUItem):
    """Base class for the items whose only field is a UID."""

    _name = ""

    def __init__(self, value: OptionalUIDType = None, validate: bool = True) -> None:
        self._uid: UID | None = None
        self._skip_validation = not validate
        if value is not None:
            self.uid = value

    @property
    def uid(self) -> UID | None:
        """Get or set the item's UID field value."""
        return self._uid

    @uid.setter
    def uid(self, value: OptionalUIDType) -> None:
        # An empty value is treated the same as no value
        self._uid = (
            set_uid(value, self._name, validate=not self._skip_validation) or None
        )

    @property
    def _decoders(self) -> Any:
        return [((4, None), "uid", self._wrap_uid_bytes, [])]

    @property
    def _encoders(self) -> Any:
        return [
            ("item_type", PACK_UCHAR, []),
            (None, self._wrap_pack, [0x00, PACK_UCHAR]),
            ("item_length", PACK_UINT2, []),
            ("uid", self._wrap_encode_str, []),
        ]

    @property
    def item_length(self) -> int:
        """Return the item's *Item Length* field value as :class:`int`."""
        return len(self._wrap_encode_str(self.uid))

    def __str__(self) -> str:
        """Return a string representation of the Item."""
        # "An Abstract Syntax Sub-item." -> "Abstract Syntax Sub-item"
        s = [(self.__doc__ or "").splitlines()[0].rstrip(".").split(" ", 1)[-1]]
        s.append(f"  Item type: 0x{self.item_type:02X}")
        s.append(f"  Item length: {self.item_length} bytes")
        if self.uid:
            s.append(f"  {self._name}: ={self.uid.name}")

        return "\n".join(s)


# A-ASSOCIATE-RQ and -AC items
class ApplicationContextItem(_UIDItem):
    """An Application Context Item.

    An Application Context explicitly defines the set of application service
    elements, related options and any other information necessary for the
    inter-working of Application Entities on an association. A single
    *Application Context Name* is defined by the DICOM Standard:
    ``1.2.840.10008.3.1.1.1``.

    **Encoding**

    +--------+-------------+--------------------------+
    | Offset | Length      | Description              |
    +========+=============+==========================+
    | 0      | 1           | Item type (``0x10``)     |
    +--------+-------------+--------------------------+
    | 1      | 1           | Reserved                 |
    +--------+-------------+--------------------------+
    | 2      | 2           | Item length              |
    +--------+-------------+--------------------------+
    | 4      | Variable    | Application context name |
    +--------+-------------+--------------------------+

    References
    ----------
    * DICOM Standard, Part 7, :dcm:`Annex A.2.1<part07/sect_A.2.html#sect_A.2.1>`
    * DICOM Standard, Part 8,
      :dcm:`Section 9.3.2.1<part08/sect_9.3.2.html#sect_9.3.2.1>`
    """

    _name = "Application Context Name"

    def __init__(
        self, value: OptionalUIDType = APPLICATION_CONTEXT_NAME, validate: bool = True
    ) -> None:
        """Initialise a new Application Context Item."""
        super().__init__(value, validate)

    @property
    def application_context_name(self) -> UID | None:
        """Return the item's *Application Context Name* field value."""
        return self.uid


# Presentation Context Item sub-items
class AbstractSyntaxSubItem(_UIDItem):
    """An Abstract Syntax Sub-item.

    The Abstract Syntax identifies the SOP Class (or meta SOP Class) being
    negotiated by a Presentation Context (RQ) Item.

    **Encoding**

    +--------+-------------+------------------------------------+
    | Offset | Length      | Description                        |
    +========+=============+====================================+
    | 0      | 1           | Item type (``0x30``)               |
    +--------+-------------+------------------------------------+
    | 1      | 1           | Reserved                           |
    +--------+-------------+------------------------------------+
    | 2      | 2           | Item length                        |
    +--------+-------------+------------------------------------+
    | 4      | Variable    | Abstract syntax name               |
    +--------+-------------+------------------------------------+

    References
    ----------
    * DICOM Standard, Part 8,
      :dcm:`Section 9.3.2.2.1 <part08/sect_9.3.2.2.html#sect_9.3.2.2.1>`
    """

    _name = "Abstract Syntax Name"

    @property
    def abstract_syntax_name(self) -> UID | None:
        """Return the item's *Abstract Syntax Name* field value."""
        return self.uid


class TransferSyntaxSubItem(_UIDItem):
    """A Transfer Syntax Sub-item.

    A Transfer Syntax is a set of encoding rules able to unambiguously
    represent the data elements defined by one or more Abstract Syntaxes
    (byte ordering, compression, etc).

    **Encoding**

    +--------+-------------+------------------------------------+
    | Offset | Length      | Description                        |
    +========+=============+====================================+
    | 0      | 1           | Item type (``0x40``)               |
    +--------+-------------+------------------------------------+
    | 1      | 1           | Reserved                           |
    +--------+-------------+------------------------------------+
    | 2      | 2           | Item length                        |
    +--------+-------------+------------------------------------+
    | 4      | Variable    | Transfer syntax name               |
    +--------+-------------+------------------------------------+

    References
    ----------
    * DICOM Standard, Part 8,
      :dcm:`Section 9.3.2.2.2 <part08/sect_9.3.2.2.2.html>`
    """

    _name = "Transfer Syntax Name"

    @property
    def transfer_syntax_name(self) -> UID | None:
        """Return the item's *Transfer Syntax Name* field value."""
        return self.uid


# User Information Item sub-items
class MaximumLengthSubItem(PDUItem):
    """A Maximum Length Sub-item.

    The Maximum Length Sub-item allows the receivers to limit the size of the
    Presentation Data Values List parameters of each P-DATA PDU.

    **Encoding**

    +--------+-------------+------------------------------------+
    | Offset | Length      | Description                        |
    +========+=============+====================================+
    | 0      | 1           | Item type (``0x51``)               |
    +--------+-------------+------------------------------------+
    | 1      | 1           | Reserved                           |
    +--------+-------------+------------------------------------+
    | 2      | 2           | Item length (always ``4``)         |
    +--------+-------------+------------------------------------+
    | 4      | 4           | Maximum length received            |
    +--------+-------------+------------------------------------+

    References
    ----------
    * DICOM Standard, Part 8,
      :dcm:`Annex D.1 <part08/chapter_D.html#sect_D.1.1>`
    """

    def __init__(self, maximum_length_received: int | None = None) -> None:
        """Initialise a new Maximum Length Item."""
        self.maximum_length_received = maximum_length_received

    @property
    def _decoders(self) -> Any:
        return [((4, 4), "maximum_length_received", self._wrap_unpack, [UNPACK_UINT4])]

    @property
    def _encoders(self) -> Any:
        return [
            ("item_type", PACK_UCHAR, []),
            (None, self._wrap_pack, [0x00, PACK_UCHAR]),
            ("item_length", PACK_UINT2, []),
            ("maximum_length_received", PACK_UINT4, []),
        ]

    @property
    def item_length(self) -> int:
        """Return the item's *Item Length* field value as :class:`int`."""
        return 4

    def __str__(self) -> str:
        """Return a string representation of the Item."""
        s = "Maximum length Sub-item\n"
        s += f"  Item type: 0x{self.item_type:02X}\n"
        s += f"  Item length: {self.item_length} bytes\n"
        s += f"  Maximum length received: {self.maximum_length_received}\n"

        return s


class ImplementationClassUIDSubItem(_UIDItem):
    """An Implementation Class UID Sub-item.

    Identifies the implementation of the peer at Association establishment.

    References
    ----------
    * DICOM Standard, Part 7, :dcm:`Annex D.3.3.2 <part07/sect_D.3.3.2.html>`
    """

    _name = "Implementation Class UID"

    @property
    def implementation_class_uid(self) -> UID | None:
        """Return the item's *Implementation Class UID* field value."""
        return self.uid


class ImplementationVersionNameSubItem(PDUItem):
    """An Implementation Version Name Sub-item.

    The *Implementation Version Name* is a string of 1 to 16 ISO 646:1990
    (basic G0 set) characters.

    References
    ----------
    * DICOM Standard, Part 7, :dcm:`Annex D.3.3.2 <part07/sect_D.3.3.2.html>`
    """

    def __init__(self, value: str | bytes | None = None) -> None:
        """Initialise a new Implementation Version Name Item."""
        self._implementation_version_name: str | None = None
        if value is not None:
            self.implementation_version_name = value

    @property
    def _decoders(self) -> Any:
        return [((4, None), "implementation_version_name", self._wrap_uid_bytes, [])]

    @property
    def _encoders(self) -> Any:
        return [
            ("item_type", PACK_UCHAR, []),
            (None, self._wrap_pack, [0x00, PACK_UCHAR]),
            ("item_length", PACK_UINT2, []),
            ("implementation_version_name", self._wrap_encode_str, []),
        ]

    @property
    def implementation_version_name(self) -> str | None:
        """Get or set the item's *Implementation Version Name* field value."""
        return self._implementation_version_name

    @implementation_version_name.setter
    def implementation_version_name(self, value: str | bytes | None) -> None:
        if self._skip_validation:
            if isinstance(value, bytes):
                value = decode_bytes(value)

            self._implementation_version_name = value or None
            return

        self._implementation_version_name = set_ae(value, "Implementation Version Name")

    @property
    def item_length(self) -> int:
        """Return the item's *Item Length* field value as :class:`int`."""
        return len(self._wrap_encode_str(self.implementation_version_name))

    def __str__(self) -> str:
        """Return a string representation of the Item."""
        s = "Implementation Version Name Sub-item\n"
        s += f"  Item type: 0x{self.item_type:02X}\n"
        s += f"  Item length: {self.item_length} bytes\n"
        s += f"  Implementation version name: {self.implementation_version_name}\n"

        return s


_SubItemType = (
    MaximumLengthSubItem | ImplementationClassUIDSubItem | ImplementationVersionNameSubItem
)


class UserInformationItem:
    """A User Information Item.

    Used by the association requestor and acceptor to include user
    information in the association negotiation. Exactly one is sent in each
    direction and its values can't be changed once created.

    Parameters
    ----------
    maximum_length : int, optional
        The maximum size of a P-DATA-TF PDU that will be accepted, ``0`` for
        no limit (default ``16384``).
    implementation_class_uid : str or pydicom.uid.UID, optional
        The *Implementation Class UID*, defaults to
        :attr:`~pyassoc.PYASSOC_IMPLEMENTATION_UID`. If ``None`` then no
        Implementation Class UID Sub-item will be encoded.
    implementation_version_name : str, optional
        The *Implementation Version Name*, defaults to
        :attr:`~pyassoc.PYASSOC_IMPLEMENTATION_VERSION`. If ``None`` then no
        Implementation Version Name Sub-item will be encoded.

    Notes
    -----
    The *User Data* of the item is a sequence of sub-items, each of which
    uses the same 4 byte header as the other items:

    +------------------------------+------+-----------------------------+
    | Sub-item                     | Type | Value                       |
    +==============================+======+=============================+
    | Maximum Length Received      | 0x51 | 4 byte unsigned big endian  |
    +------------------------------+------+-----------------------------+
    | Implementation Class UID     | 0x52 | UID                         |
    +------------------------------+------+-----------------------------+
    | Implementation Version Name  | 0x55 | 1 to 16 characters          |
    +------------------------------+------+-----------------------------+

    Sub-items of any other type are skipped when decoding.

    References
    ----------
    * DICOM Standard, Part 8,
      :dcm:`Section 9.3.2.3<part08/sect_9.3.2.3.html>`
    * DICOM Standard, Part 7, :dcm:`Annex D.3.3 <part07/sect_D.3.3.html>`
    """

    def __init__(
        self,
        maximum_length: int = DEFAULT_MAX_LENGTH,
        implementation_class_uid: OptionalUIDType = PYASSOC_IMPLEMENTATION_UID,
        implementation_version_name: str | None = PYASSOC_IMPLEMENTATION_VERSION,
        validate: bool = True,
    ) -> None:
        if not isinstance(maximum_length, int):
            raise TypeError("'maximum_length' must be an int")

        if not 0 <= maximum_length <= MAXIMUM_MAX_LENGTH:
            msg = (
                "'maximum_length' must be between 0 and "
                f"{MAXIMUM_MAX_LENGTH}, not {maximum_length}"
            )
            LOGGER.error(msg)
            raise ValueError(msg)

        self._maximum_length = maximum_length
        self._implementation_class_uid = set_uid(
            implementation_class_uid, "Implementation Class UID", validate=validate
        )
        if validate:
            implementation_version_name = set_ae(
                implementation_version_name, "Implementation Version Name"
            )

        self._implementation_version_name = implementation_version_name

    @classmethod
    def decode(cls, bytestream: bytes) -> "UserInformationItem | None":
        """Return a :class:`UserInformationItem` decoded from `bytestream`.

        Parameters
        ----------
        bytestream : bytes
            Either an encoded User Information Item (starting with ``0x50``)
            or just the item's *User Data* sub-items.

        Returns
        -------
        UserInformationItem or None
            The decoded item, or ``None`` if a known sub-item is truncated or
            can't be decoded. Missing sub-items take the default values.
        """
        try:
            if bytestream[:1] == PACK_UCHAR(USER_INFORMATION_ITEM):
                item_length = read_uint16(bytestream, 2)
                bytestream = bytestream[4 : 4 + item_length]

            values: dict[str, Any] = {}
            for item in cls._generate_user_data(bytestream):
                if isinstance(item, MaximumLengthSubItem):
                    values["maximum_length"] = item.maximum_length_received
                elif isinstance(item, ImplementationClassUIDSubItem):
                    # Empty values keep the defaults
                    if item.implementation_class_uid:
                        values["implementation_class_uid"] = (
                            item.implementation_class_uid
                        )
                elif isinstance(item, ImplementationVersionNameSubItem):
                    if item.implementation_version_name:
                        values["implementation_version_name"] = (
                            item.implementation_version_name
                        )
        except MalformedPDUError as exc:
            LOGGER.error(f"Unable to decode the User Information item: {exc}")
            for line in pretty_bytes(bytestream):
                LOGGER.debug(line)

            return None

        if "maximum_length" not in values:
            LOGGER.warning(
                "No Maximum Length Sub-item in the User Information, using "
                f"the default of {DEFAULT_MAX_LENGTH}"
            )

        return cls(validate=False, **values)

    @staticmethod
    def _generate_user_data(bytestream: bytes) -> Iterator[_SubItemType]:
        """Yield the known sub-items decoded from `bytestream`.

        Iterates until fewer than 2 bytes remain, unknown sub-item types are
        skipped using their *Item Length*.
        """
        offset = 0
        while len(bytestream) - offset >= 2:
            item_type = read_uint8(bytestream, offset)
            item_length = read_uint16(bytestream, offset + 2)
            try:
                item = _USER_DATA_TYPES[item_type]()
            except KeyError:
                LOGGER.debug(
                    f"Skipping unknown User Information sub-item type "
                    f"0x{item_type:02X} ({item_length} bytes)"
                )
            else:
                item.decode(subrange(bytestream, offset, 4 + item_length))
                yield item

            offset += 4 + item_length

    def encode(self) -> bytes:
        """Return the encoded User Information Item."""
        user_data = b"".join(item.encode() for item in self.user_data)
        return (
            PACK_UCHAR(USER_INFORMATION_ITEM)
            + PACK_UCHAR(0x00)
            + PACK_UINT2(len(user_data))
            + user_data
        )

    def __eq__(self, other: Any) -> bool:
        """Return ``True`` if `self` equals `other`."""
        if other is self:
            return True

        if isinstance(other, UserInformationItem):
            return (
                self.maximum_length == other.maximum_length
                and self.implementation_class_uid == other.implementation_class_uid
                and self.implementation_version_name
                == other.implementation_version_name
            )

        return NotImplemented

    @property
    def implementation_class_uid(self) -> UID | None:
        """Return the *Implementation Class UID*."""
        return self._implementation_class_uid

    @property
    def implementation_version_name(self) -> str | None:
        """Return the *Implementation Version Name*."""
        return self._implementation_version_name

    @property
    def item_length(self) -> int:
        """Return the item's *Item Length* field value as :class:`int`."""
        return sum(len(item) for item in self.user_data)

    @property
    def item_type(self) -> int:
        """Return the item's *Item Type* field value (``0x50``)."""
        return USER_INFORMATION_ITEM

    def __len__(self) -> int:
        """Return the total length of the encoded item as :class:`int`."""
        return 4 + self.item_length

    @property
    def maximum_length(self) -> int:
        """Return the *Maximum Length Received*."""
        return self._maximum_length

    def __str__(self) -> str:
        """Return a string representation of the Item."""
        s = "User Information Item\n"
        s += f"  Item type: 0x{self.item_type:02X}\n"
        s += f"  Item length: {self.item_length} bytes\n"
        s += "  User Data:\n"
        for item in self.user_data:
            lines = str(item).rstrip("\n").split("\n")
            s += f"    + {lines[0]}\n"
            s += "".join(f"      {line}\n" for line in lines[1:])

        return s

    @property
    def user_data(self) -> list[_SubItemType]:
        """Return the sub-items that will be encoded, in the order they are
        sent.
        """
        items: list[_SubItemType] = [MaximumLengthSubItem(self.maximum_length)]

        if self.implementation_class_uid:
            items.append(
                ImplementationClassUIDSubItem(
                    self.implementation_class_uid, validate=False
                )
            )

        if self.implementation_version_name:
            item = ImplementationVersionNameSubItem()
            # Already validated (or decoded from a peer)
            item._skip_validation = True
            item.implementation_version_name = self.implementation_version_name
            items.append(item)

        return items


# PDU items and sub-items, indexed by their type
PDU_ITEM_TYPES = {
    APPLICATION_CONTEXT_ITEM: ApplicationContextItem,
    ABSTRACT_SYNTAX_SUB_ITEM: AbstractSyntaxSubItem,
    TRANSFER_SYNTAX_SUB_ITEM: TransferSyntaxSubItem,
    MAXIMUM_LENGTH_SUB_ITEM: MaximumLengthSubItem,
    IMPLEMENTATION_CLASS_UID_SUB_ITEM: ImplementationClassUIDSubItem,
    IMPLEMENTATION_VERSION_NAME_SUB_ITEM: ImplementationVersionNameSubItem,
}

_TYPE_TO_PDU_ITEM = {vv: kk for kk, vv in PDU_ITEM_TYPES.items()}

_USER_DATA_TYPES: dict[int, Callable[[], _SubItemType]] = {
    MAXIMUM_LENGTH_SUB_ITEM: MaximumLengthSubItem,
    IMPLEMENTATION_CLASS_UID_SUB_ITEM: ImplementationClassUIDSubItem,
    IMPLEMENTATION_VERSION_NAME_SUB_ITEM: ImplementationVersionNameSubItem,
}
