#!/usr/bin/env python3
"""Admin client that asks a running dashboard to drop its cached staking data.

Usage:
    # Key from the command line
    python scripts/refresh_cache.py --url http://localhost:6080 --api-key secret

    # Key from the environment (CACHE_API_KEY, the same variable the server reads)
    export CACHE_API_KEY=secret
    python scripts/refresh_cache.py --url http://localhost:6080

    # Also upload a unit leveling table
    python scripts/refresh_cache.py --url http://localhost:6080 --level-data unit_level.json
"""

import argparse
import json
import os
import sys
from typing import Optional

import requests


def get_api_key(args: argparse.Namespace) -> Optional[str]:
    """Admin key from --api-key, then CACHE_API_KEY."""
    if args.api_key:
        return args.api_key.strip()
    if os.environ.get("CACHE_API_KEY"):
        print("📝 Using admin key from CACHE_API_KEY environment variable")
        return os.environ["CACHE_API_KEY"].strip()
    print("❌ Error: No admin key provided (use --api-key or CACHE_API_KEY)")
    return None


def _post(url: str, api_key: str, payload: Optional[dict] = None) -> Optional[dict]:
    try:
        response = requests.post(
            url,
            json=payload,
            headers={"x-api-key": api_key},
            timeout=30,
        )
    except requests.exceptions.RequestException as e:
        print(f"❌ Failed to send request: {e}")
        return None

    try:
        data = response.json()
    except ValueError:
        data = {}

    if response.status_code == 200:
        return data
    if response.status_code == 401:
        print("❌ Admin key rejected")
    else:
        print(f"❌ Request failed with status {response.status_code}")
        print(f"   Response: {data or response.text}")
    return None


def refresh_cache(url: str, api_key: str) -> bool:
    endpoint = f"{url}/api/refresh-cache"
    print(f"📡 Refreshing cache at {endpoint}...")
    data = _post(endpoint, api_key)
    if data is None:
        return False
    print(f"✅ Cache refreshed, {data.get('removed', 0)} keys removed")
    return True


def upload_level_data(url: str, api_key: str, path: str) -> bool:
    try:
        with open(path, "r") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        print(f"❌ Could not read level data from {path}: {e}")
        return False

    endpoint = f"{url}/api/level-data"
    print(f"📡 Uploading level data to {endpoint}...")
    if _post(endpoint, api_key, payload) is None:
        return False
    print(f"✅ Level data uploaded ({len(payload.get('levelingData', []))} levels)")
    return True


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Refresh the cached staking data of a running dashboard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--url",
        required=True,
        help="Base URL of the dashboard API (e.g., http://localhost:6080)",
    )
    parser.add_argument(
        "--api-key",
        help="Admin key. If not provided, CACHE_API_KEY is used.",
    )
    parser.add_argument(
        "--level-data",
        help="Path to a unit leveling JSON table to upload after the refresh",
    )
    args = parser.parse_args()

    api_key = get_api_key(args)
    if not api_key:
        return 1

    url = args.url.rstrip("/")
    if not refresh_cache(url, api_key):
        return 2

    if args.level_data and not upload_level_data(url, api_key, args.level_data):
        return 3

    return 0


if __name__ == "__main__":
    sys.exit(main())
