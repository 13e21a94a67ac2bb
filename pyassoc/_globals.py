"""Global variables for pyassoc."""

from pydicom.uid import UID

from pyassoc._version import __version__


_version = __version__.split(".")[:3]

# UUID derived root, see Part 5 Annex B.2
# Encoded as UI, maximum 64 characters
PYASSOC_UID_PREFIX: str = "2.25.303612488745394612682907683453256108."
"""The UID root used by *pyassoc*."""

# Encoded as SH, maximum 16 characters
PYASSOC_IMPLEMENTATION_VERSION: str = f"PYASSOC_{''.join(_version)}"
"""The *Implementation Version Name* used by *pyassoc*"""

PYASSOC_IMPLEMENTATION_UID: UID = UID(f"{PYASSOC_UID_PREFIX}{'.'.join(_version)}")
"""The *Implementation Class UID* used by *pyassoc*"""

# The default Maximum PDU Length (in bytes)
# A value of 0 indicates unlimited maximum length
DEFAULT_MAX_LENGTH: int = 16384

# Largest value that fits the 4 byte Maximum Length Received field
MAXIMUM_MAX_LENGTH: int = 0xFFFFFFFF

# DICOM Application Context Name - see Part 7, Annex A.2.1
APPLICATION_CONTEXT_NAME: str = "1.2.840.10008.3.1.1.1"

# The only protocol version defined by Part 8
PROTOCOL_VERSION: int = 0x01

DEFAULT_TRANSFER_SYNTAXES: list[str] = [
    "1.2.840.10008.1.2",  # Implicit VR Little Endian,
    "1.2.840.10008.1.2.1",  # Explicit VR Little Endian,
    "1.2.840.10008.1.2.1.99",  # Deflated Explicit VR Little Endian
    "1.2.840.10008.1.2.2",  # Explicit VR Big Endian,
]
"""Default transfer syntaxes used when creating presentation contexts.

* Implicit VR Little Endian
* Explicit VR Little Endian
* Deflated Explicit VR Little Endian
* Explicit VR Big Endian (retired)
"""

# PDU types
A_ASSOCIATE_RQ_TYPE: int = 0x01
A_ASSOCIATE_AC_TYPE: int = 0x02
A_ASSOCIATE_RJ_TYPE: int = 0x03

# PDU item and sub-item types, Part 8 Section 9.3 and Part 7 Annex D.3.3
APPLICATION_CONTEXT_ITEM: int = 0x10
PRESENTATION_CONTEXT_RQ_ITEM: int = 0x20
PRESENTATION_CONTEXT_AC_ITEM: int = 0x21
ABSTRACT_SYNTAX_SUB_ITEM: int = 0x30
TRANSFER_SYNTAX_SUB_ITEM: int = 0x40
USER_INFORMATION_ITEM: int = 0x50
MAXIMUM_LENGTH_SUB_ITEM: int = 0x51
IMPLEMENTATION_CLASS_UID_SUB_ITEM: int = 0x52
IMPLEMENTATION_VERSION_NAME_SUB_ITEM: int = 0x55

# Presentation context negotiation results, Part 8 Table 9-18
RESULT_ACCEPTANCE: int = 0x00
RESULT_USER_REJECTION: int = 0x01
RESULT_PROVIDER_REJECTION: int = 0x02
RESULT_ABSTRACT_SYNTAX_NOT_SUPPORTED: int = 0x03
RESULT_TRANSFER_SYNTAX_NOT_SUPPORTED: int = 0x04


OptionalUIDType = str | bytes | UID | None
