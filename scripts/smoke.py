#!/usr/bin/env python3
"""
Smoke test for a running b2b-gateway using urllib.request (no external deps)

    BASE_URL=http://127.0.0.1:8000 B2B_API_KEY=<key from bootstrap.py> python scripts/smoke.py
"""
import json
import os
import sys
import urllib.error
import urllib.request

BASE_URL = os.getenv("BASE_URL", "http://127.0.0.1:8000").rstrip("/")
API_KEY = os.getenv("B2B_API_KEY")


def check(path, expected_status=200, headers=None, check_json=None):
    """Request a path and compare status and top-level JSON keys"""
    req = urllib.request.Request(f"{BASE_URL}{path}", headers=headers or {})
    try:
        with urllib.request.urlopen(req) as response:
            status, body = response.status, response.read()
    except urllib.error.HTTPError as e:
        status, body = e.code, e.read()
    except urllib.error.URLError as e:
        print(f"FAIL {path}: {e.reason}")
        return False

    if status != expected_status:
        print(f"FAIL {path}: expected status {expected_status}, got {status}")
        return False
    if check_json:
        data = json.loads(body.decode("utf-8"))
        for key, expected_value in check_json.items():
            if data.get(key) != expected_value:
                print(f"FAIL {path}: expected {key}={expected_value!r}, got {data.get(key)!r}")
                return False
    print(f"ok   {path}: status {status}")
    return True


def main():
    print("Running smoke tests against", BASE_URL)

    tests = [
        ("/v1/health", 200, None, {"status": "ok"}),
        ("/v1/version", 200, None, {"status": "ok"}),
        ("/v1/b2b-api/info", 401, None, {"code": "MISSING_API_KEY"}),
        ("/v1/b2b-api/info", 401, {"x-api-key": "00000000-invalid"}, {"code": "INVALID_API_KEY"}),
    ]
    if API_KEY:
        tests += [
            ("/v1/b2b-api/info", 200, {"x-api-key": API_KEY}, {"success": True}),
            ("/v1/b2b-api/leads?limit=5", 200, {"x-api-key": API_KEY}, {"success": True}),
        ]
    else:
        print("B2B_API_KEY not set, skipping authenticated checks")

    failed = sum(not check(*t) for t in tests)
    if failed:
        print(f"\n{failed} check(s) failed")
        sys.exit(1)
    print("\nAll smoke checks passed")


if __name__ == "__main__":
    main()
