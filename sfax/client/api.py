from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Mapping, Optional, Protocol, Tuple, Union

from sfax.client.http import HttpResponse, SfaxHttpClient
from sfax.core.config import SfaxCredentials, TransportSettings
from sfax.core.params import DateLike, api_param_string, build_request_uri, format_api_date, to_int
from sfax.core.responses import get_download_response, get_json_response
from sfax.core.token import Clock, TokenGenerator

log = logging.getLogger("sfax.client")

DIRECTION_INBOUND = "Inbound"
DIRECTION_OUTBOUND = "Outbound"
FORMAT_PDF = "Pdf"
FORMAT_TIF = "Tif"


class HttpTransport(Protocol):
    def request(
        self,
        method: str,
        url: str,
        *,
        file_field: Optional[Tuple[str, str]] = None,
        file_path: Optional[str] = None,
    ) -> HttpResponse: ...


def normalize_direction(direction: str) -> str:
    """Anything other than "outbound" (any case) is inbound."""

    return DIRECTION_OUTBOUND if direction.lower() == "outbound" else DIRECTION_INBOUND


def normalize_format(file_format: str) -> str:
    """Anything other than "pdf" (any case) is TIFF."""

    return FORMAT_PDF if file_format.lower() == "pdf" else FORMAT_TIF


class SfaxClient:
    """Client for the Sfax fax API.

    Every call builds a fresh token, sends exactly one HTTP request and
    decodes the response. There is no retry, caching or pagination: list
    calls return one page and the caller re-invokes with the watermark.

    The HTTP transport is created on first use unless one is injected.

    """

    def __init__(
        self,
        credentials: SfaxCredentials,
        *,
        http_client: Optional[HttpTransport] = None,
        transport_settings: Optional[TransportSettings] = None,
        clock: Optional[Clock] = None,
    ):
        self.credentials = credentials
        self._tokens = TokenGenerator(credentials, clock=clock)
        self._transport_settings = transport_settings or TransportSettings()
        self._http_client = http_client

    @classmethod
    def from_env(cls, **kwargs: Any) -> "SfaxClient":
        """Build a client from SFAX_* environment variables."""

        return cls(
            SfaxCredentials.from_env(),
            transport_settings=TransportSettings.from_env(),
            **kwargs,
        )

    @property
    def http_client(self) -> HttpTransport:
        if self._http_client is None:
            s = self._transport_settings
            self._http_client = SfaxHttpClient(
                max_upload_bytes=s.max_upload_bytes, timeout_sec=s.timeout_sec
            )
        return self._http_client

    # --- sending ---

    def send_fax(
        self,
        name: str,
        number: str,
        file_path: str,
        barcode: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Upload a local file and queue it as a fax.

        Returns the decoded JSON reply (e.g. `SendFaxQueueId`, `isSuccess`).
        """

        params: Dict[str, Any] = {
            "RecipientName": name,
            "RecipientFax": number,
        }
        self._add_fax_lists(params, barcode, options)

        response = self._send(
            "POST",
            "SendFax",
            params,
            file_field=("file", os.path.basename(file_path)),
            file_path=file_path,
        )
        return get_json_response(response)

    def send_fax_from_url(
        self,
        name: str,
        number: str,
        file_type: str,
        url: str,
        barcode: Optional[Mapping[str, Any]] = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Queue a fax whose document the API fetches from `url`.

        `file_type` "pdf" (any case) means PDF; any other value means TIFF.
        """

        params: Dict[str, Any] = {
            "RecipientName": name,
            "RecipientFax": number,
            "FileType": normalize_format(file_type),
            "FileDataURL": url,
        }
        self._add_fax_lists(params, barcode, options)

        response = self._send("POST", "SendFaxFromURL", params)
        return get_json_response(response)

    # --- listing ---

    def receive_inbound_fax(
        self,
        watermark_id: Optional[int] = None,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        max_items: Optional[int] = None,
    ) -> Any:
        """List received faxes."""

        return self.receive_fax(DIRECTION_INBOUND, watermark_id, start_date, end_date, max_items)

    def receive_outbound_fax(
        self,
        watermark_id: Optional[int] = None,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        max_items: Optional[int] = None,
    ) -> Any:
        """List sent faxes."""

        return self.receive_fax(DIRECTION_OUTBOUND, watermark_id, start_date, end_date, max_items)

    def receive_fax(
        self,
        direction: str = DIRECTION_INBOUND,
        watermark_id: Optional[int] = None,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
        max_items: Optional[int] = None,
    ) -> Any:
        """List inbound or outbound faxes.

        `MaxItems` is only sent together with a watermark; without one the
        API default page size applies even if `max_items` is given. Non-numeric
        `max_items` values are sent as 0.
        """

        params: Dict[str, Any] = {}
        if watermark_id is not None:
            params["WatermarkId"] = watermark_id
        if start_date is not None:
            params["StartDateUTC"] = format_api_date(start_date)
        if end_date is not None:
            params["EndDateUTC"] = format_api_date(end_date)
        if watermark_id is not None:
            params["MaxItems"] = to_int(max_items)

        operation = f"Receive{normalize_direction(direction)}Fax"
        response = self._send("GET", operation, params)
        return get_json_response(response)

    # --- downloads ---

    def download_inbound_fax_as_pdf(self, fax_id: Union[int, str]) -> Union[Any, bytes]:
        return self.download_fax(fax_id, DIRECTION_INBOUND, FORMAT_PDF)

    def download_inbound_fax_as_tif(self, fax_id: Union[int, str]) -> Union[Any, bytes]:
        return self.download_fax(fax_id, DIRECTION_INBOUND, FORMAT_TIF)

    def download_outbound_fax_as_pdf(self, fax_id: Union[int, str]) -> Union[Any, bytes]:
        return self.download_fax(fax_id, DIRECTION_OUTBOUND, FORMAT_PDF)

    def download_outbound_fax_as_tif(self, fax_id: Union[int, str]) -> Union[Any, bytes]:
        return self.download_fax(fax_id, DIRECTION_OUTBOUND, FORMAT_TIF)

    def download_fax(
        self,
        fax_id: Union[int, str],
        direction: str = DIRECTION_INBOUND,
        file_format: str = FORMAT_PDF,
    ) -> Union[Any, bytes]:
        """Download a fax document.

        Returns the raw document bytes, or the decoded JSON object when the
        API answered 200 with a JSON error payload instead of a document.

        Raises:
          InvalidResponseError: on any non-200 status.
        """

        operation = f"Download{normalize_direction(direction)}FaxAs{normalize_format(file_format)}"
        response = self._send("GET", operation, {"FaxId": fax_id})
        return get_download_response(response)

    # --- internals ---

    def request_uri(self, operation: str, params: Optional[Mapping[str, Any]] = None) -> str:
        """Build the full request URI for an API operation, with a fresh token."""

        return build_request_uri(
            self.credentials.uri,
            operation,
            token=self._tokens.generate(),
            api_key=self.credentials.api_key,
            params=params,
        )

    @staticmethod
    def _add_fax_lists(
        params: Dict[str, Any],
        barcode: Optional[Mapping[str, Any]],
        options: Optional[Mapping[str, Any]],
    ) -> None:
        if barcode:
            params["BarcodeOption"] = api_param_string(barcode)
        if options:
            params["OptionalParams"] = api_param_string(options)

    def _send(
        self,
        method: str,
        operation: str,
        params: Mapping[str, Any],
        *,
        file_field: Optional[Tuple[str, str]] = None,
        file_path: Optional[str] = None,
    ) -> HttpResponse:
        uri = self.request_uri(operation, params)
        start = time.monotonic()
        status_code: Optional[int] = None
        try:
            if file_field is not None:
                response = self.http_client.request(
                    method, uri, file_field=file_field, file_path=file_path
                )
            else:
                response = self.http_client.request(method, uri)
            status_code = response.status
            return response
        finally:
            log.info(
                "sfax_request",
                extra={
                    "operation": operation,
                    "method": method,
                    "status_code": status_code,
                    "duration_ms": int((time.monotonic() - start) * 1000),
                },
            )
