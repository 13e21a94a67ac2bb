"""Tests for the standard A-ASSOCIATE logging handlers."""

import logging

import pytest

from pyassoc import _config, debug_logger
from pyassoc._handlers import standard_pdu_recv_handler, standard_pdu_sent_handler
from pyassoc.acse import ACSE, LocalIdentity
from pyassoc.pdu import A_ASSOCIATE_AC, A_ASSOCIATE_RJ, A_ASSOCIATE_RQ
from pyassoc.presentation import PresentationContext
from .encoded_pdu_items import a_associate_ac, a_associate_rj, a_associate_rq


LOGGER = logging.getLogger("pyassoc")
LOGGER.setLevel(logging.CRITICAL)

VERIFICATION = "1.2.840.10008.1.1"
IMPLICIT = "1.2.840.10008.1.2"


class TestStandardHandlers:
    """Tests for the standard PDU logging handlers."""

    def test_recv_associate_rq(self, caplog):
        """Test the summary of a received A-ASSOCIATE-RQ."""
        pdu = A_ASSOCIATE_RQ.decode(a_associate_rq)
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            lines = standard_pdu_recv_handler(pdu)

        assert lines[0] == "Request Parameters:"
        assert lines[1] == f"{' INCOMING A-ASSOCIATE-RQ PDU ':=^76}"
        assert "Their Implementation Class UID:      1.2.3.4" in lines
        assert "Their Implementation Version Name:   PEER_1.0" in lines
        assert "Calling Application Name:    ECHOSCU" in lines
        assert "Called Application Name:     ANY-SCP" in lines
        assert "Their Max PDU Receive Size:  16384" in lines
        assert "Presentation Context:" in lines
        assert "  Context ID:        1 (Proposed)" in lines
        assert "    Abstract Syntax: =Verification SOP Class" in lines
        assert "    Proposed Transfer Syntax:" in lines
        assert "      =Implicit VR Little Endian" in lines
        assert lines[-1] == f"{' END A-ASSOCIATE-RQ PDU ':=^76}"

        for line in lines:
            assert line in caplog.text

    def test_recv_associate_ac(self, caplog):
        """Test the summary of a received A-ASSOCIATE-AC."""
        pdu = A_ASSOCIATE_AC.decode(a_associate_ac)
        requested = [PresentationContext(1, VERIFICATION, [IMPLICIT])]
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            lines = standard_pdu_recv_handler(pdu, requested)

        assert lines[0] == "Accept Parameters:"
        assert " INCOMING A-ASSOCIATE-AC PDU " in lines[1]
        assert "Presentation Contexts:" in lines
        assert "  Context ID:        1 (Accepted)" in lines
        assert "    Abstract Syntax: =Verification SOP Class" in lines
        assert "    Accepted Transfer Syntax: =Implicit VR Little Endian" in lines
        assert "Their Implementation Version Name: PEER_1.0" in caplog.text

    def test_recv_associate_ac_not_requested(self):
        """Test the summary without the requested contexts."""
        pdu = A_ASSOCIATE_AC.decode(a_associate_ac)
        lines = standard_pdu_recv_handler(pdu)
        assert "  Context ID:        1 (Accepted)" in lines
        assert not any("Abstract Syntax" in line for line in lines)

    def test_recv_associate_rj(self, caplog):
        """Test the summary of a received A-ASSOCIATE-RJ."""
        pdu = A_ASSOCIATE_RJ.decode(a_associate_rj)
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            lines = standard_pdu_recv_handler(pdu)

        assert " INCOMING A-ASSOCIATE-RJ PDU " in lines[1]
        assert "Result:    Rejected (Permanent)" in lines
        assert "Source:    DUL service-user" in lines
        assert "Reason:    No reason given" in lines
        assert "Reason:    No reason given" in caplog.text

    def test_send_associate_rq(self):
        """Test the summary of a sent A-ASSOCIATE-RQ."""
        pdu = A_ASSOCIATE_RQ.decode(a_associate_rq)
        lines = standard_pdu_sent_handler(pdu)
        assert " OUTGOING A-ASSOCIATE-RQ PDU " in lines[1]
        assert "Our Implementation Class UID:      1.2.3.4" in lines
        assert "Our Implementation Version Name:   PEER_1.0" in lines
        assert "Our Max PDU Receive Size:    16384" in lines

    def test_send_associate_ac(self):
        """Test the summary of a sent A-ASSOCIATE-AC."""
        pdu = A_ASSOCIATE_AC.decode(a_associate_ac)
        requested = [PresentationContext(1, VERIFICATION, [IMPLICIT])]
        lines = standard_pdu_sent_handler(pdu, requested)
        assert " OUTGOING A-ASSOCIATE-AC PDU " in lines[1]
        assert "Responding Application Name: ANY-SCP" in lines
        assert "    Abstract Syntax: =Verification SOP Class" in lines

    def test_send_associate_rj(self):
        """Test the summary of a sent A-ASSOCIATE-RJ."""
        lines = standard_pdu_sent_handler(A_ASSOCIATE_RJ(2, 3, 2))
        assert " OUTGOING A-ASSOCIATE-RJ PDU " in lines[1]
        assert "Result:    Rejected (Transient)" in lines
        assert "Reason:    Local limit exceeded" in lines


class TestACSELogging:
    """Tests for the ACSE logging."""

    def setup_method(self):
        self.log_level = _config.LOG_HANDLER_LEVEL

    def teardown_method(self):
        _config.LOG_HANDLER_LEVEL = self.log_level

    def test_request(self, caplog):
        """Test sending an A-ASSOCIATE-RQ is logged."""
        acse = ACSE()
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            acse.serialize_associate_request([(VERIFICATION, [IMPLICIT])])

        assert " OUTGOING A-ASSOCIATE-RQ PDU " in caplog.text

    def test_respond_accept(self, caplog):
        """Test accepting an association is logged."""
        acse = ACSE(supported_contexts=[VERIFICATION])
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            acse.respond(a_associate_rq)

        assert " INCOMING A-ASSOCIATE-RQ PDU " in caplog.text
        assert " OUTGOING A-ASSOCIATE-AC PDU " in caplog.text
        assert "Accepting Association" in caplog.text

    def test_respond_reject(self, caplog):
        """Test rejecting an association is logged."""
        acse = ACSE(identity=LocalIdentity("STORESCP"), require_called_aet=True)
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            acse.respond(a_associate_rq)

        assert "The called AE title 'ANY-SCP' doesn't match 'STORESCP'" in caplog.text
        assert "Rejecting Association" in caplog.text
        assert " OUTGOING A-ASSOCIATE-RJ PDU " in caplog.text
        assert "Reason:    Called AE title not recognised" in caplog.text

    def test_rejected_context_logged(self, caplog):
        """Test a rejected presentation context is logged."""
        with caplog.at_level(logging.INFO, logger="pyassoc"):
            ACSE().respond(a_associate_rq)

        assert (
            "Rejecting presentation context 1: abstract syntax not supported"
        ) in caplog.text
        assert " INCOMING A-ASSOCIATE-RQ PDU " not in caplog.text

    def test_receive_accept(self, caplog):
        """Test receiving an A-ASSOCIATE-AC is logged."""
        acse = ACSE()
        acse.serialize_associate_request([(VERIFICATION, [IMPLICIT])])
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            acse.process_accept(a_associate_ac)

        assert " INCOMING A-ASSOCIATE-AC PDU " in caplog.text
        assert "    Abstract Syntax: =Verification SOP Class" in caplog.text

    @pytest.mark.parametrize("level", ["none", "other"])
    def test_handler_level(self, level, caplog):
        """Test the summaries are only logged when the level is 'standard'."""
        _config.LOG_HANDLER_LEVEL = level
        acse = ACSE(supported_contexts=[VERIFICATION])
        with caplog.at_level(logging.DEBUG, logger="pyassoc"):
            acse.serialize_associate_request([(VERIFICATION, [IMPLICIT])])
            acse.respond(a_associate_rq)

        assert "A-ASSOCIATE-RQ PDU" not in caplog.text
        assert "A-ASSOCIATE-AC PDU" not in caplog.text
        assert "Accepting Association" in caplog.text


class TestDebugLogger:
    """Tests for debug_logger()."""

    def setup_method(self):
        self.logger = logging.getLogger("pyassoc")
        self.handlers = list(self.logger.handlers)
        self.level = self.logger.level

    def teardown_method(self):
        self.logger.handlers = self.handlers
        self.logger.setLevel(self.level)

    def test_debug_logger(self):
        """Test the debug logger has a single stream handler."""
        debug_logger()
        debug_logger()
        assert self.logger.level == logging.DEBUG
        assert len(self.logger.handlers) == 1
        assert isinstance(self.logger.handlers[0], logging.StreamHandler)
