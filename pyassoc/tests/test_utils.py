"""Unit tests for the pyassoc.utils module."""

import logging

import pytest

from pydicom.uid import UID

from pyassoc import _config, debug_logger
from pyassoc.utils import decode_bytes, pretty_bytes, set_ae, set_uid
from .encoded_pdu_items import a_associate_rq


# debug_logger()


class TestPrettyBytes:
    """Tests for utils.pretty_bytes()."""

    def test_parameters(self):
        """Test parameters are correct."""
        # Default
        result = pretty_bytes(a_associate_rq)
        assert len(result) == 12
        assert isinstance(result[0], str)

        # prefix
        result = pretty_bytes(a_associate_rq, prefix="\\x")
        for line in result:
            assert line[:2] == "\\x"

        # delimiter
        result = pretty_bytes(a_associate_rq, prefix="", delimiter=",")
        for line in result:
            assert line[2] == ","

        # items_per_line
        result = pretty_bytes(a_associate_rq, prefix="", delimiter="", items_per_line=10)
        assert len(result[0]) == 20

        # max_size
        result = pretty_bytes(
            a_associate_rq, prefix="", delimiter="", items_per_line=10, max_size=100
        )
        assert len(result) == 11  # 10 plus the cutoff line
        assert result[0] == "Only dumping 100 bytes."

        result = pretty_bytes(a_associate_rq, max_size=None)
        assert len(result) == 12

        # suffix
        result = pretty_bytes(a_associate_rq, suffix="xxx")
        for line in result:
            assert line[-3:] == "xxx"

    def test_bytesio(self):
        """Test wrap list using bytes"""
        result = pretty_bytes(a_associate_rq, prefix="", delimiter="", items_per_line=10)
        assert isinstance(result[0], str)


class TestDecodeBytes:
    """Tests for utils.decode_bytes()."""

    def setup_method(self):
        self.default_codecs = _config.CODECS

    def teardown_method(self):
        _config.CODECS = self.default_codecs

    def test_default(self):
        """Test the default codecs."""
        assert decode_bytes(b"ECHOSCU") == "ECHOSCU"
        assert decode_bytes(b"\xc3\xa9") == "é"

    def test_custom(self):
        """Test a custom set of codecs."""
        _config.CODECS = ("ascii", "latin_1")
        assert decode_bytes(b"\xe9") == "é"

    def test_fail(self, caplog):
        """Test raises if unable to decode."""
        _config.CODECS = ("ascii",)
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            msg = r"Unable to decode 'C3 A9' using the ascii codec\(s\)"
            with pytest.raises(ValueError, match=msg):
                decode_bytes(b"\xc3\xa9")

        assert "Unable to decode value using the 'ascii' codec" in caplog.text


class TestSetAE:
    """Tests for utils.set_ae()."""

    def test_good_ae_str(self):
        """Test good elem.value"""
        assert set_ae("AE", "foo") == "AE"
        assert set_ae("              AE", "foo") == "              AE"
        assert set_ae("ABCDEFGHIJKLMNOP", "foo") == "ABCDEFGHIJKLMNOP"

    def test_good_ae_bytes(self):
        """Test bytes are decoded and stripped"""
        assert set_ae(b"AE", "foo") == "AE"
        assert set_ae(b"  AE  ", "foo") == "AE"
        assert set_ae(b"ABCDEFGHIJKLMNOP", "foo") == "ABCDEFGHIJKLMNOP"

    def test_none(self):
        """Test None values."""
        assert set_ae(None, "foo") is None

        msg = "'foo' must be str or bytes, not 'NoneType'"
        with pytest.raises(TypeError, match=msg):
            set_ae(None, "foo", allow_none=False)

    def test_bad_type(self):
        """Test a non-str raises."""
        msg = "'foo' must be str, bytes or None, not 'int'"
        with pytest.raises(TypeError, match=msg):
            set_ae(45, "foo")

    def test_empty(self, caplog):
        """Test empty values."""
        assert set_ae("", "foo") == ""

        msg = "Invalid 'foo' value - must not be empty or only spaces"
        with caplog.at_level(logging.ERROR, logger="pyassoc"):
            with pytest.raises(ValueError, match=msg):
                set_ae("   ", "foo", allow_empty=False)

        assert msg in caplog.text

    def test_invalid(self, caplog):
        """Test invalid values."""
        with caplog.at_level(logging.ERROR, logger="pyassoc"):
            msg = "Invalid 'foo' value 'ABCDEFGHIJKLMNOPQ' - must not exceed 16"
            with pytest.raises(ValueError, match=msg):
                set_ae("ABCDEFGHIJKLMNOPQ", "foo")

            msg = "must not contain control characters or backslashes"
            with pytest.raises(ValueError, match=msg):
                set_ae("AE\\B", "foo")

        assert "Invalid 'foo' value 'ABCDEFGHIJKLMNOPQ'" in caplog.text


class TestSetUID:
    """Tests for utils.set_uid()."""

    def setup_method(self):
        self.enforce_uid_conformance = _config.ENFORCE_UID_CONFORMANCE

    def teardown_method(self):
        _config.ENFORCE_UID_CONFORMANCE = self.enforce_uid_conformance

    def test_str(self):
        """Test a str is converted to UID."""
        uid = set_uid("1.2.3", "foo")
        assert isinstance(uid, UID)
        assert uid == "1.2.3"

    def test_bytes(self):
        """Test bytes are decoded."""
        assert set_uid(b"1.2.3", "foo") == UID("1.2.3")

    def test_none(self):
        """Test None values."""
        assert set_uid(None, "foo") is None

        msg = "'foo' must be str, bytes or UID, not 'NoneType'"
        with pytest.raises(TypeError, match=msg):
            set_uid(None, "foo", allow_none=False)

    def test_bad_type(self):
        """Test a bad type raises."""
        msg = "'foo' must be str, bytes, UID or None, not 'int'"
        with pytest.raises(TypeError, match=msg):
            set_uid(1, "foo")

    def test_invalid(self, caplog):
        """Test an invalid UID raises."""
        with caplog.at_level(logging.ERROR, logger="pyassoc"):
            msg = "Invalid 'foo' value '' - must not be an empty str"
            with pytest.raises(ValueError, match=msg):
                set_uid("", "foo")

            with pytest.raises(ValueError, match="must not exceed 64"):
                set_uid("1" * 65, "foo")

        assert "Invalid 'foo' value ''" in caplog.text

    def test_no_validation(self):
        """Test validate=False skips the checks."""
        assert set_uid("", "foo", validate=False) == ""
        assert set_uid("1" * 65, "foo", validate=False) == "1" * 65

    def test_non_conformant(self, caplog):
        """Test a non-conformant UID warns unless conformance is enforced."""
        with caplog.at_level(logging.WARNING, logger="pyassoc"):
            assert set_uid("1.2.03", "foo") == "1.2.03"

        assert "Non-conformant 'foo' value '1.2.03'" in caplog.text

        _config.ENFORCE_UID_CONFORMANCE = True
        with pytest.raises(ValueError, match="UID is non-conformant"):
            set_uid("1.2.03", "foo")
