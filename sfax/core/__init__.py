"""Core building blocks: credentials, token derivation, request encoding, decoding."""

from .config import SfaxCredentials, TransportSettings
from .errors import ConfigurationError, InvalidResponseError, SfaxError
from .params import api_param_string, build_request_uri
from .responses import get_download_response, get_json_response
from .token import TokenGenerator, format_token_date

__all__ = [
    "ConfigurationError",
    "InvalidResponseError",
    "SfaxCredentials",
    "SfaxError",
    "TokenGenerator",
    "TransportSettings",
    "api_param_string",
    "build_request_uri",
    "format_token_date",
    "get_download_response",
    "get_json_response",
]
