"""pyassoc configuration options"""

from typing import Callable, Any

from pyassoc._validators import validate_ae, validate_ui


LOG_HANDLER_LEVEL: str = "standard"
"""Default (non-user) association logging

* If ``"none"`` then the summaries of sent and received A-ASSOCIATE PDUs
  will not be logged, however there will still be some logging (warnings,
  errors, etc)
* If ``"standard"`` then the summaries are logged at the ``DEBUG`` level.

Default: ``"standard"``

Examples
--------

>>> from pyassoc import _config
>>> _config.LOG_HANDLER_LEVEL = "none"
"""


ENFORCE_UID_CONFORMANCE: bool = False
"""Enforce UID conformance

If ``True`` then UIDs will be checked to ensure they're conformant to the
DICOM Standard and if not then a :class:`ValueError` raised when the UID is
used to build an item, otherwise UIDs will only be checked to ensure they're
between 1 and 64 characters long.

UIDs decoded from a peer's PDUs are never checked.

Default: ``False``

Examples
--------

>>> from pyassoc import _config
>>> _config.ENFORCE_UID_CONFORMANCE = True
"""


CODECS: tuple[str, ...] = ("ascii", "utf-8")
"""Customise the codecs used to decode text values.

The codecs are used when decoding the following parameters:

* A-ASSOCIATE-RQ and A-ASSOCIATE-AC: *Called AE Title*, *Calling AE Title*

  * Application Context Item: *Application Context Name*
  * Presentation Context Items

    * Abstract Syntax Sub-item: *Abstract Syntax Name*
    * Transfer Syntax Sub-item: *Transfer Syntax Name*
  * User Information Item

    * Implementation Class UID Sub-item: *Implementation Class UID*
    * Implementation Version Name Sub-item: *Implementation Version Name*

Decoding will be attempted in the order that the codecs appear in
``CODECS``. Values are always encoded using UTF-8, which is identical to
ASCII for conformant UIDs and AE titles.

Default: ``("ascii", "utf-8")``

Examples
--------

Add Latin-1 as a final fallback codec:

>>> from pyassoc import _config
>>> _config.CODECS = ("ascii", "utf-8", "latin_1")
"""


VALIDATORS: dict[str, Callable[[Any], tuple[bool, str]]] = {
    "AE": validate_ae,
    "UI": validate_ui,
}
"""Customise the validation performed on locally created PDU parameters.

**AE**
    Function signature: ``def func(value: str) -> tuple[bool, str]``

    Used for the *Called AE Title*, *Calling AE Title* and *Implementation
    Version Name*.

**UI**
    Function signature: ``def func(value: pydicom.uid.UID) -> tuple[bool, str]``

    Used for abstract syntaxes, transfer syntaxes, the *Application Context
    Name* and the *Implementation Class UID*.

The function should return a :class:`tuple` of (:class:`bool`, :class:`str`)
as the ``(result, msg)``. If the `result` is ``True`` then `msg` is ignored,
otherwise `msg` will be used to provide feedback about why validation has
failed.

Examples
--------

Perform no validation of UIDs:

>>> from pyassoc import _config
>>> def my_validator(value): return (True, "")
...
>>> _config.VALIDATORS['UI'] = my_validator
"""
