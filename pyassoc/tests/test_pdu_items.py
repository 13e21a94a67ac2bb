"""Tests for the pyassoc.pdu_items module."""

import logging

import pytest

from pydicom.uid import UID

from pyassoc import (
    PYASSOC_IMPLEMENTATION_UID,
    PYASSOC_IMPLEMENTATION_VERSION,
    _config,
)
from pyassoc.exceptions import MalformedPDUError
from pyassoc.pdu_items import (
    AbstractSyntaxSubItem,
    ApplicationContextItem,
    ImplementationClassUIDSubItem,
    ImplementationVersionNameSubItem,
    MaximumLengthSubItem,
    PDUItem,
    TransferSyntaxSubItem,
    UserInformationItem,
)
from .encoded_pdu_items import (
    abstract_syntax,
    application_context,
    implementation_class_uid,
    implementation_version_name,
    maximum_length_received,
    transfer_syntax,
    user_information,
)


LOGGER = logging.getLogger("pyassoc")
LOGGER.setLevel(logging.CRITICAL)


class TestPDUItem:
    def test_decoders_raises(self):
        """Test the PDUItem._decoders property raises NotImplementedError"""
        item = PDUItem()
        with pytest.raises(NotImplementedError):
            item._decoders

    def test_encoders_raises(self):
        """Test the PDUItem._encoders property raises NotImplementedError"""
        item = PDUItem()
        with pytest.raises(NotImplementedError):
            item._encoders

    def test_item_length_raises(self):
        """Test PDUItem.item_length raises NotImplementedError"""
        item = PDUItem()
        with pytest.raises(NotImplementedError):
            item.item_length

    def test_generate_items(self):
        """Test the items are yielded in order."""
        bytestream = application_context + abstract_syntax + transfer_syntax
        items = list(PDUItem._generate_items(bytestream))
        assert items == [
            (0x10, application_context),
            (0x30, abstract_syntax),
            (0x40, transfer_syntax),
        ]

    def test_generate_items_empty(self):
        """Test no items are yielded for empty data."""
        assert list(PDUItem._generate_items(b"")) == []

    def test_generate_items_truncated(self, caplog):
        """Test an item with a length past the end of the data."""
        bytestream = application_context + abstract_syntax[:-3]
        with caplog.at_level(logging.WARNING, logger="pyassoc"):
            items = list(PDUItem._generate_items(bytestream))

        assert items == [(0x10, application_context), (0x30, abstract_syntax[:-3])]
        assert (
            "has an item length of 17 bytes but only 14 bytes are available"
        ) in caplog.text

    def test_generate_items_trailing(self, caplog):
        """Test trailing bytes too short for an item are ignored."""
        with caplog.at_level(logging.WARNING, logger="pyassoc"):
            items = list(PDUItem._generate_items(application_context + b"\x40\x00"))

        assert items == [(0x10, application_context)]
        assert "Ignoring 2 trailing byte(s)" in caplog.text

    def test_decode_field_failure(self):
        """Test a field that can't be decoded raises MalformedPDUError."""
        item = MaximumLengthSubItem()
        with pytest.raises(MalformedPDUError, match="maximum_length_received"):
            item.decode(b"\x51\x00\x00\x04\x00\x00")

    def test_equality(self):
        """Test the equality operators."""
        item = ApplicationContextItem()
        assert item == item
        assert item == ApplicationContextItem()
        assert not item != ApplicationContextItem()
        assert item != ApplicationContextItem("1.2.3")
        assert item != AbstractSyntaxSubItem("1.2.840.10008.3.1.1.1")
        assert item != "1.2.840.10008.3.1.1.1"


class TestApplicationContext:
    def test_init(self):
        """Test creating a new item."""
        item = ApplicationContextItem()
        assert item.item_type == 0x10
        assert item.item_length == 21
        assert len(item) == 25
        assert item.application_context_name == "1.2.840.10008.3.1.1.1"
        assert isinstance(item.application_context_name, UID)

    def test_decode(self):
        """Check decoding produces the correct application context."""
        item = ApplicationContextItem(None)
        assert item.application_context_name is None
        item.decode(application_context)

        assert item.item_type == 0x10
        assert item.item_length == 21
        assert item.application_context_name == "1.2.840.10008.3.1.1.1"

    def test_encode(self):
        """Check encoding produces the correct output."""
        assert ApplicationContextItem().encode() == application_context

    def test_decode_not_validated(self):
        """Test decoded values aren't validated."""
        item = ApplicationContextItem()
        item.decode(b"\x10\x00\x00\x41" + b"1" * 65)
        assert item.application_context_name == "1" * 65
        assert item.encode() == b"\x10\x00\x00\x41" + b"1" * 65

    def test_invalid(self):
        """Test an invalid value raises when validated."""
        with pytest.raises(ValueError, match="must not exceed 64 characters"):
            ApplicationContextItem("1" * 65)

        item = ApplicationContextItem("1" * 65, validate=False)
        assert item.application_context_name == "1" * 65

    def test_str(self):
        """Test the string output."""
        s = str(ApplicationContextItem())
        assert s.startswith("Application Context Item")
        assert "Item type: 0x10" in s
        assert "Item length: 21 bytes" in s
        assert "Application Context Name: =DICOM Application Context Name" in s


class TestAbstractSyntax:
    def test_decode(self):
        """Check decoding the abstract syntax sub-item."""
        item = AbstractSyntaxSubItem()
        item.decode(abstract_syntax)

        assert item.item_type == 0x30
        assert item.item_length == 17
        assert item.abstract_syntax_name == UID("1.2.840.10008.1.1")

    def test_encode(self):
        """Check encoding produces the correct output."""
        item = AbstractSyntaxSubItem("1.2.840.10008.1.1")
        assert item.encode() == abstract_syntax
        assert len(item) == 21

    def test_bytes(self):
        """Test a bytes value is decoded."""
        item = AbstractSyntaxSubItem(b"1.2.840.10008.1.1")
        assert item.abstract_syntax_name == "1.2.840.10008.1.1"

    def test_empty(self):
        """Test an empty item."""
        item = AbstractSyntaxSubItem()
        assert item.abstract_syntax_name is None
        assert item.item_length == 0
        assert item.encode() == b"\x30\x00\x00\x00"

    def test_bad_type(self):
        """Test a value of the wrong type raises."""
        with pytest.raises(TypeError):
            AbstractSyntaxSubItem(1234)

    def test_str(self):
        """Test the string output."""
        s = str(AbstractSyntaxSubItem("1.2.840.10008.1.1"))
        assert s.startswith("Abstract Syntax Sub-item")
        assert "Abstract Syntax Name: =Verification SOP Class" in s


class TestTransferSyntax:
    def test_decode(self):
        """Check decoding the transfer syntax sub-item."""
        item = TransferSyntaxSubItem()
        item.decode(transfer_syntax)

        assert item.item_type == 0x40
        assert item.item_length == 17
        assert item.transfer_syntax_name == UID("1.2.840.10008.1.2")

    def test_decode_padded(self):
        """Test trailing padding is removed."""
        item = TransferSyntaxSubItem()
        item.decode(b"\x40\x00\x00\x13" b" 1.2.840.10008.1.2\x00")
        assert item.transfer_syntax_name == "1.2.840.10008.1.2"
        assert item.item_length == 17

    def test_encode(self):
        """Check encoding produces the correct output."""
        item = TransferSyntaxSubItem("1.2.840.10008.1.2")
        assert item.encode() == transfer_syntax

    def test_str(self):
        """Test the string output."""
        s = str(TransferSyntaxSubItem("1.2.840.10008.1.2"))
        assert s.startswith("Transfer Syntax Sub-item")
        assert "=Implicit VR Little Endian" in s


class TestMaximumLength:
    def test_decode(self):
        """Check decoding the maximum length sub-item."""
        item = MaximumLengthSubItem()
        item.decode(maximum_length_received)

        assert item.item_type == 0x51
        assert item.item_length == 4
        assert item.maximum_length_received == 16384

    def test_encode(self):
        """Check encoding produces the correct output."""
        assert MaximumLengthSubItem(16384).encode() == maximum_length_received
        assert MaximumLengthSubItem(0).encode() == b"\x51\x00\x00\x04\x00\x00\x00\x00"

    def test_str(self):
        """Test the string output."""
        s = str(MaximumLengthSubItem(16384))
        assert "Maximum length received: 16384" in s


class TestImplementationClassUID:
    def test_decode(self):
        """Check decoding the implementation class UID sub-item."""
        item = ImplementationClassUIDSubItem()
        item.decode(implementation_class_uid)

        assert item.item_type == 0x52
        assert item.item_length == 7
        assert item.implementation_class_uid == UID("1.2.3.4")

    def test_encode(self):
        """Check encoding produces the correct output."""
        item = ImplementationClassUIDSubItem("1.2.3.4")
        assert item.encode() == implementation_class_uid


class TestImplementationVersionName:
    def test_decode(self):
        """Check decoding the implementation version name sub-item."""
        item = ImplementationVersionNameSubItem()
        item.decode(implementation_version_name)

        assert item.item_type == 0x55
        assert item.item_length == 8
        assert item.implementation_version_name == "PEER_1.0"

    def test_encode(self):
        """Check encoding produces the correct output."""
        item = ImplementationVersionNameSubItem("PEER_1.0")
        assert item.encode() == implementation_version_name

    def test_invalid(self):
        """Test an invalid value raises."""
        with pytest.raises(ValueError, match="must not exceed 16 characters"):
            ImplementationVersionNameSubItem("ABCDEFGHIJKLMNOPQ")

    def test_decode_not_validated(self):
        """Test decoded values aren't validated."""
        item = ImplementationVersionNameSubItem()
        item.decode(b"\x55\x00\x00\x11" b"ABCDEFGHIJKLMNOPQ")
        assert item.implementation_version_name == "ABCDEFGHIJKLMNOPQ"

    def test_str(self):
        """Test the string output."""
        s = str(ImplementationVersionNameSubItem("PEER_1.0"))
        assert "Implementation version name: PEER_1.0" in s


class TestUserInformation:
    def setup_method(self):
        self.codecs = _config.CODECS

    def teardown_method(self):
        _config.CODECS = self.codecs

    def test_init_defaults(self):
        """Test the default values."""
        item = UserInformationItem()
        assert item.maximum_length == 16384
        assert item.implementation_class_uid == PYASSOC_IMPLEMENTATION_UID
        assert item.implementation_version_name == PYASSOC_IMPLEMENTATION_VERSION
        assert item.item_type == 0x50

    def test_encode(self):
        """Check encoding produces the correct output."""
        item = UserInformationItem(16384, "1.2.3.4", "PEER_1.0")
        assert item.encode() == user_information
        assert item.item_length == 31
        assert len(item) == 35

    def test_encode_max_length_only(self):
        """Test only the maximum length sub-item is mandatory."""
        item = UserInformationItem(32768, None, None)
        assert item.encode() == b"\x50\x00\x00\x08" b"\x51\x00\x00\x04\x00\x00\x80\x00"
        assert len(item.user_data) == 1

    def test_user_data(self):
        """Test the sub-items are in the expected order."""
        item = UserInformationItem(16384, "1.2.3.4", "PEER_1.0")
        user_data = item.user_data
        assert isinstance(user_data[0], MaximumLengthSubItem)
        assert isinstance(user_data[1], ImplementationClassUIDSubItem)
        assert isinstance(user_data[2], ImplementationVersionNameSubItem)

    def test_decode(self):
        """Check decoding an encoded user information item."""
        item = UserInformationItem.decode(user_information)

        assert item.maximum_length == 16384
        assert item.implementation_class_uid == UID("1.2.3.4")
        assert item.implementation_version_name == "PEER_1.0"
        assert item.encode() == user_information

    def test_decode_sub_items_only(self):
        """Test decoding just the sub-items."""
        item = UserInformationItem.decode(user_information[4:])
        assert item == UserInformationItem(16384, "1.2.3.4", "PEER_1.0")

    def test_decode_unknown_only(self, caplog):
        """Test decoding only an unknown sub-item uses the defaults."""
        # User Identity Negotiation (AC) sub-item, which isn't supported
        bytestream = b"\x59\x00\x00\x02\x00\x00"
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            item = UserInformationItem.decode(bytestream)

        assert item is not None
        assert item.maximum_length == 16384
        assert item.implementation_class_uid == PYASSOC_IMPLEMENTATION_UID
        assert item.implementation_version_name == PYASSOC_IMPLEMENTATION_VERSION
        assert "Skipping unknown User Information sub-item type 0x59" in caplog.text
        assert "No Maximum Length Sub-item" in caplog.text

    def test_decode_unknown_skipped(self):
        """Test unknown sub-items don't affect the known ones."""
        bytestream = (
            b"\x54\x00\x00\x03\x01\x02\x03"
            + maximum_length_received
            + b"\x56\x00\x00\x00"
            + implementation_class_uid
        )
        item = UserInformationItem.decode(bytestream)
        assert item.maximum_length == 16384
        assert item.implementation_class_uid == "1.2.3.4"

    def test_decode_empty(self):
        """Test decoding no sub-items."""
        item = UserInformationItem.decode(b"")
        assert item.maximum_length == 16384

    def test_decode_empty_values_use_defaults(self):
        """Test empty UID and version name sub-items keep the defaults."""
        bytestream = (
            b"\x51\x00\x00\x04\x00\x01\x00\x00"
            + b"\x52\x00\x00\x00"
            + b"\x55\x00\x00\x00"
        )
        item = UserInformationItem.decode(bytestream)
        assert item.maximum_length == 65536
        assert item.implementation_class_uid == PYASSOC_IMPLEMENTATION_UID
        assert item.implementation_version_name == PYASSOC_IMPLEMENTATION_VERSION

        encoded = item.encode()
        assert b"\x52\x00" in encoded
        assert PYASSOC_IMPLEMENTATION_UID.encode() in encoded

    def test_round_trip(self):
        """Test encoding then decoding."""
        item = UserInformationItem(maximum_length=65536)
        decoded = UserInformationItem.decode(item.encode())
        assert decoded.maximum_length == 65536
        assert decoded == item

    def test_round_trip_no_limit(self):
        """Test a maximum length of 0 is preserved."""
        item = UserInformationItem(maximum_length=0)
        assert UserInformationItem.decode(item.encode()).maximum_length == 0

    @pytest.mark.parametrize(
        "bytestream",
        [
            maximum_length_received[:6],
            b"\x51\x00\x00\x02\x00\x00",
            b"\x52\x00\x00\x10" b"1.2.3",
            maximum_length_received + b"\x55\x00",
        ],
    )
    def test_decode_truncated(self, bytestream, caplog):
        """Test a truncated known sub-item returns None."""
        with caplog.at_level(logging.ERROR, logger="pyassoc"):
            assert UserInformationItem.decode(bytestream) is None

        assert "Unable to decode the User Information item" in caplog.text

    def test_decode_undecodable(self):
        """Test a value that can't be decoded returns None."""
        _config.CODECS = ("ascii",)
        bytestream = maximum_length_received + b"\x55\x00\x00\x02\xc3\xa9"
        assert UserInformationItem.decode(bytestream) is None

    def test_decode_not_validated(self):
        """Test decoded values aren't validated."""
        bytestream = (
            maximum_length_received
            + b"\x52\x00\x00\x41" + b"1" * 65
            + b"\x55\x00\x00\x11" + b"ABCDEFGHIJKLMNOPQ"
        )
        item = UserInformationItem.decode(bytestream)
        assert item.implementation_class_uid == "1" * 65
        assert item.implementation_version_name == "ABCDEFGHIJKLMNOPQ"
        assert item.encode()[4:] == bytestream

    def test_maximum_length_bad_type(self):
        """Test a non-int maximum length raises."""
        with pytest.raises(TypeError, match="'maximum_length' must be an int"):
            UserInformationItem("16384")

    @pytest.mark.parametrize("value", [-1, 0x100000000])
    def test_maximum_length_out_of_range(self, value, caplog):
        """Test a maximum length that can't be encoded raises."""
        msg = "'maximum_length' must be between 0 and 4294967295"
        with caplog.at_level(logging.ERROR, logger="pyassoc"):
            with pytest.raises(ValueError, match=msg):
                UserInformationItem(value)

        assert msg in caplog.text

    def test_invalid_implementation_values(self):
        """Test invalid implementation values raise."""
        with pytest.raises(ValueError, match="Implementation Class UID"):
            UserInformationItem(implementation_class_uid="")

        with pytest.raises(ValueError, match="Implementation Version Name"):
            UserInformationItem(implementation_version_name="ABCDEFGHIJKLMNOPQ")

    def test_equality(self):
        """Test the equality operators."""
        item = UserInformationItem()
        assert item == UserInformationItem()
        assert item != UserInformationItem(maximum_length=0)
        assert item != UserInformationItem(implementation_version_name=None)
        assert item != MaximumLengthSubItem(16384)

    def test_str(self):
        """Test the string output."""
        s = str(UserInformationItem(16384, "1.2.3.4", "PEER_1.0"))
        assert s.startswith("User Information Item")
        assert "Item length: 31 bytes" in s
        assert "+ Maximum length Sub-item" in s
        assert "Implementation Class UID: =1.2.3.4" in s
        assert "Implementation version name: PEER_1.0" in s
