"""Set module shortcuts and globals"""

import logging

from ._version import __version__
from ._globals import (
    PYASSOC_UID_PREFIX,
    PYASSOC_IMPLEMENTATION_VERSION,
    PYASSOC_IMPLEMENTATION_UID,
)


assert 1 <= len(PYASSOC_IMPLEMENTATION_VERSION) <= 16
assert PYASSOC_IMPLEMENTATION_UID.is_valid


# Convenience imports
# ruff: noqa: E402,F401
from pyassoc._globals import DEFAULT_MAX_LENGTH, DEFAULT_TRANSFER_SYNTAXES
from pyassoc.acse import ACSE, LocalIdentity
from pyassoc.dimse import CommandField
from pyassoc.exceptions import MalformedPDUError
from pyassoc.pdu_items import UserInformationItem
from pyassoc.presentation import (
    PresentationContext,
    build_context,
    negotiate_as_acceptor,
    negotiate_as_requestor,
)


# Setup default logging
logging.getLogger(__name__).addHandler(logging.NullHandler())


def debug_logger() -> None:
    """Setup the logging for debugging."""
    logger = logging.getLogger(__name__)
    # Ensure only have one StreamHandler
    logger.handlers = []
    handler = logging.StreamHandler()
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter("%(levelname).1s: %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


__all__ = [
    "__version__",
    "PYASSOC_UID_PREFIX",
    "PYASSOC_IMPLEMENTATION_VERSION",
    "PYASSOC_IMPLEMENTATION_UID",
    "ACSE",
    "CommandField",
    "DEFAULT_MAX_LENGTH",
    "DEFAULT_TRANSFER_SYNTAXES",
    "LocalIdentity",
    "MalformedPDUError",
    "PresentationContext",
    "UserInformationItem",
    "build_context",
    "negotiate_as_acceptor",
    "negotiate_as_requestor",
    "debug_logger",
]
