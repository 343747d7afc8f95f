from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from sfax.client.api import (
    DIRECTION_INBOUND,
    DIRECTION_OUTBOUND,
    FORMAT_PDF,
    FORMAT_TIF,
    SfaxClient,
    normalize_direction,
    normalize_format,
)
from sfax.core.config import SfaxCredentials, TransportSettings
from sfax.core.errors import SfaxError

log = logging.getLogger("sfax.cli")


def _print_json(obj: object) -> None:
    """Print JSON to stdout."""
    print(json.dumps(obj, indent=2, sort_keys=True, default=str))


def _parse_pairs(raw: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated KEY=VALUE arguments, keeping their order."""

    out: Dict[str, str] = {}
    for item in raw or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {item!r}")
        out[key.strip()] = value
    return out


def _log_level(name: str) -> int:
    """Resolve a level name like "info"; unknown names raise ValueError."""

    level = logging.getLevelNamesMapping().get(str(name).strip().upper())
    if level is None:
        raise ValueError(f"unknown log level: {name!r}")
    return level


def _make_client(args: argparse.Namespace) -> SfaxClient:
    """Build a client from SFAX_* env vars plus command-line overrides."""

    creds = SfaxCredentials.from_env(
        uri=args.uri,
        username=args.username,
        api_key=args.api_key,
        encryption_key=args.encryption_key,
        iv=args.iv,
    )
    return SfaxClient(creds, transport_settings=TransportSettings.from_env())


def cmd_send_fax(args: argparse.Namespace) -> int:
    """Upload a local file as a fax."""
    c = _make_client(args)
    result = c.send_fax(
        args.name,
        args.number,
        args.file,
        barcode=_parse_pairs(args.barcode),
        options=_parse_pairs(args.option),
    )
    _print_json(result)
    return 0


def cmd_send_fax_from_url(args: argparse.Namespace) -> int:
    """Send a fax whose document is fetched from a URL."""
    c = _make_client(args)
    result = c.send_fax_from_url(
        args.name,
        args.number,
        args.file_type,
        args.url,
        barcode=_parse_pairs(args.barcode),
        options=_parse_pairs(args.option),
    )
    _print_json(result)
    return 0


def cmd_receive(args: argparse.Namespace) -> int:
    """List one page of inbound or outbound faxes."""
    c = _make_client(args)
    result = c.receive_fax(
        args.direction,
        watermark_id=args.watermark_id,
        start_date=args.start_date,
        end_date=args.end_date,
        max_items=args.max_items,
    )
    _print_json(result)
    return 0


def cmd_download(args: argparse.Namespace) -> int:
    """Download a fax document and save it to disk.

    Security notes:
    - The document bytes are written as-is and never printed.

    """
    c = _make_client(args)
    direction = normalize_direction(args.direction)
    file_format = normalize_format(args.format)
    result: Any = c.download_fax(args.fax_id, direction, file_format)

    if not isinstance(result, bytes):
        # API-level failure reported as JSON.
        _print_json(result)
        return 2

    out_path = args.out or f"fax_{args.fax_id}.{file_format.lower()}"
    with open(out_path, "wb") as f:
        f.write(result)

    _print_json({"saved_to": os.path.abspath(out_path), "size_bytes": len(result)})
    return 0


def _add_fax_list_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--barcode",
        action="append",
        metavar="KEY=VALUE",
        help="Barcode option (repeatable), e.g. BarcodeData=12345",
    )
    p.add_argument(
        "--option",
        action="append",
        metavar="KEY=VALUE",
        help="Optional parameter (repeatable), e.g. CoverPageName=Default",
    )


def _add_receive_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--watermark-id", type=int, default=None, help="Resume after this watermark")
    p.add_argument("--start-date", default=None, help="ISO-8601 start date (converted to UTC)")
    p.add_argument("--end-date", default=None, help="ISO-8601 end date (converted to UTC)")
    p.add_argument(
        "--max-items", type=int, default=None, help="Page size (only sent with --watermark-id)"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="sfax", description="Sfax fax API client")
    p.add_argument("--uri", default=None, help="API base URI (env: SFAX_URI)")
    p.add_argument("--username", default=None, help="API username (env: SFAX_USERNAME)")
    p.add_argument("--api-key", default=None, help="API key (env: SFAX_API_KEY)")
    p.add_argument(
        "--encryption-key", default=None, help="Token encryption key (env: SFAX_ENCRYPTION_KEY)"
    )
    p.add_argument("--iv", default=None, help="Token encryption IV (env: SFAX_IV)")
    p.add_argument(
        "--log-level",
        default=os.environ.get("SFAX_LOG_LEVEL", "WARNING"),
        help="Logging level (env: SFAX_LOG_LEVEL)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sf = sub.add_parser("send-fax", help="Send a local file as a fax")
    sf.add_argument("name", help="Recipient name")
    sf.add_argument("number", help="Recipient fax number")
    sf.add_argument("file", help="Path to the PDF/TIFF to send")
    _add_fax_list_args(sf)
    sf.set_defaults(func=cmd_send_fax)

    su = sub.add_parser("send-fax-from-url", help="Send a fax from a document URL")
    su.add_argument("name", help="Recipient name")
    su.add_argument("number", help="Recipient fax number")
    su.add_argument("url", help="Public URL of the document")
    su.add_argument("--file-type", default="pdf", help="pdf or tif (default: pdf)")
    _add_fax_list_args(su)
    su.set_defaults(func=cmd_send_fax_from_url)

    ib = sub.add_parser("inbound", help="List received faxes")
    _add_receive_args(ib)
    ib.set_defaults(func=cmd_receive, direction=DIRECTION_INBOUND)

    ob = sub.add_parser("outbound", help="List sent faxes")
    _add_receive_args(ob)
    ob.set_defaults(func=cmd_receive, direction=DIRECTION_OUTBOUND)

    dl = sub.add_parser("download", help="Download a fax document")
    dl.add_argument("direction", choices=["inbound", "outbound"], help="Fax direction")
    dl.add_argument("fax_id", help="Fax ID")
    dl.add_argument(
        "--format",
        default=FORMAT_PDF.lower(),
        choices=[FORMAT_PDF.lower(), FORMAT_TIF.lower()],
        help="Document format (default: pdf)",
    )
    dl.add_argument("--out", default=None, help="Output path (default: fax_<id>.<format>)")
    dl.set_defaults(func=cmd_download)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        logging.basicConfig(level=_log_level(args.log_level))
        return int(args.func(args))
    except (SfaxError, argparse.ArgumentTypeError, ValueError, OSError) as e:
        # OSError covers missing upload files and URLError from the transport.
        log.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
