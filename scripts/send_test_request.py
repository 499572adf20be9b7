#!/usr/bin/env python3
"""
Dev helper: send a test /send request to a local send-bridge.

Builds a /send body from command-line flags and POSTs it with httpx, then
pretty-prints the JSON answer.

Usage
-----
# Two share links, recipient from TEST_TO_EMAIL in .env
python scripts/send_test_request.py \
    --link1 https://drive.google.com/file/d/<id1>/view \
    --link2 https://drive.google.com/file/d/<id2>/view

# Explicit recipient and attachment name
python scripts/send_test_request.py --to me@example.com --name contract.pdf \
    --link1 ... --link2 ...

# Show the body without sending it
python scripts/send_test_request.py --dry-run --link1 ... --link2 ...

# Target a deployed instance
python scripts/send_test_request.py --url https://send-bridge.up.railway.app ...

Environment / .env
------------------
TEST_TO_EMAIL   Default recipient when --to is not given.
"""

import argparse
import json
import os
import sys
import textwrap
from pathlib import Path

import httpx
from dotenv import load_dotenv


def _build_payload(args: argparse.Namespace) -> dict:
    payload = {
        "toEmail": args.to,
        "emailSubject": args.subject,
        "emailHtml": args.html,
        "driveLink1": args.link1,
        "driveLink2": args.link2,
    }
    if args.name:
        payload["mergedFileName"] = args.name
    return payload


def _print_response(response: httpx.Response) -> None:
    status = response.status_code
    symbol = "OK" if status == 200 else "FAIL"
    print(f"\n[{symbol}] HTTP {status}")
    try:
        print(json.dumps(response.json(), indent=2))
    except ValueError:
        print(response.text)


def main() -> int:
    project_root = Path(__file__).resolve().parent.parent
    load_dotenv(project_root / ".env")
    load_dotenv(project_root / "backend" / ".env")

    parser = argparse.ArgumentParser(
        prog="send_test_request.py",
        description="Send a test merge-and-email request to send-bridge.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/send_test_request.py --link1 URL1 --link2 URL2
              python scripts/send_test_request.py --dry-run --link1 URL1 --link2 URL2
              python scripts/send_test_request.py --url http://localhost:3000 ...
        """),
    )
    parser.add_argument("--url", default="http://localhost:3000",
                        help="send-bridge base URL (default: http://localhost:3000)")
    parser.add_argument("--link1", required=True, help="Share link of the first PDF")
    parser.add_argument("--link2", required=True, help="Share link of the second PDF")
    parser.add_argument("--to", default=os.getenv("TEST_TO_EMAIL"),
                        help="Recipient address (default: TEST_TO_EMAIL env var)")
    parser.add_argument("--subject", default="send-bridge test",
                        help='Email subject (default: "send-bridge test")')
    parser.add_argument("--html", default="<p>Merged PDF attached.</p>",
                        help="Email HTML body")
    parser.add_argument("--name", default=None, metavar="FILENAME",
                        help="Attachment name (server default: merged-<epoch ms>.pdf)")
    parser.add_argument("--timeout", type=float, default=120.0,
                        help="Client timeout in seconds (default: 120)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Print the request body without sending it.")

    args = parser.parse_args()

    if not args.to:
        print(
            "ERROR: No recipient. Pass --to or set TEST_TO_EMAIL in your environment or .env file.",
            file=sys.stderr,
        )
        return 1

    payload = _build_payload(args)
    endpoint = f"{args.url.rstrip('/')}/send"

    print(f"Endpoint : {endpoint}")
    print(f"To       : {args.to}")
    print(f"Link 1   : {args.link1}")
    print(f"Link 2   : {args.link2}")

    if args.dry_run:
        print("\n[DRY RUN] Payload:")
        print(json.dumps(payload, indent=2))
        return 0

    try:
        response = httpx.post(endpoint, json=payload, timeout=args.timeout)
    except httpx.HTTPError as e:
        print(f"\n[FAIL] Request error: {e}", file=sys.stderr)
        return 1

    _print_response(response)
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
