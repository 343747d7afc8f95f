"""Client for the Sfax fax-transmission API.

Send faxes from local files or remote URLs, list inbound/outbound faxes and
download fax documents as PDF or TIFF.
"""

from sfax.client.api import (
    DIRECTION_INBOUND,
    DIRECTION_OUTBOUND,
    FORMAT_PDF,
    FORMAT_TIF,
    SfaxClient,
)
from sfax.core.config import SfaxCredentials
from sfax.core.errors import ConfigurationError, InvalidResponseError, SfaxError

__all__ = [
    "DIRECTION_INBOUND",
    "DIRECTION_OUTBOUND",
    "FORMAT_PDF",
    "FORMAT_TIF",
    "ConfigurationError",
    "InvalidResponseError",
    "SfaxClient",
    "SfaxCredentials",
    "SfaxError",
]
