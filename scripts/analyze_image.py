#!/usr/bin/env python3
import argparse
import base64
import json
import mimetypes
import os
import sys
import uuid
from pathlib import Path

import requests

REQUEST_TIMEOUT_SECONDS = 120


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send a local image to a running Image Insight API and print the analysis.",
    )
    parser.add_argument("image", type=Path, help="Path to a JPEG/PNG/WebP image.")
    parser.add_argument(
        "--url",
        default=os.getenv("API_BASE_URL", "http://localhost:3000"),
        help="Base URL of the API (default: $API_BASE_URL or http://localhost:3000).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=REQUEST_TIMEOUT_SECONDS,
        help="Client-side timeout in seconds.",
    )
    return parser.parse_args()


def to_data_uri(path: Path) -> str:
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


def main() -> int:
    args = parse_args()
    if not args.image.is_file():
        print(f"Image not found: {args.image}", file=sys.stderr)
        return 2

    endpoint = f"{args.url.rstrip('/')}/api/analyze"
    request_id = str(uuid.uuid4())
    try:
        response = requests.post(
            endpoint,
            json={"image": to_data_uri(args.image)},
            headers={"X-Request-ID": request_id},
            timeout=args.timeout,
        )
    except requests.RequestException as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        return 1

    try:
        payload = response.json()
    except ValueError:
        print(f"HTTP {response.status_code}, response is not JSON:", file=sys.stderr)
        print(response.text[:1500], file=sys.stderr)
        return 1

    if response.ok and payload.get("success"):
        print(payload["result"])
        return 0

    print(f"HTTP {response.status_code} request_id={request_id}", file=sys.stderr)
    print(json.dumps(payload.get("error", payload), ensure_ascii=False, indent=2), file=sys.stderr)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
