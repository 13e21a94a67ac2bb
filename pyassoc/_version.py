"""Version information for pyassoc based on PEP396 and 440"""

# pyassoc version
__version__: str = "1.0.0.dev0"

# DICOM Standard edition used for the Upper Layer item definitions
__dicom_version__: str = "2025b"
