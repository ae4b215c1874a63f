#!/usr/bin/env python3
"""
End-to-end demo for the PPC Contracts agreement builder.

Creates an ACA Health CPL agreement, generates it, signs it as the publisher
and then the buyer, and prints the resulting signing state.

Prerequisites:
    1. Docker services running: make up
    2. Services healthy: make healthcheck

Usage:
    python scripts/e2e_demo.py

    # Save the signed document:
    python scripts/e2e_demo.py --out signed.html

    # Output raw JSON:
    python scripts/e2e_demo.py --json
"""

import argparse
import json
import sys
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import httpx

# Configuration
API_BASE = "http://localhost:8000"
OWNER_ID = "demo-owner"
# 1x1 transparent PNG
SIGNATURE_PNG = (
    "data:image/png;base64,"
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)

SAMPLE_REQUEST = {
    "contractType": "ACAHealth",
    "vertical": "ACA Health",
    "acaSubType": "CPL",
    "acaCplPayout": 45,
    "acaCplBufferTime": 90,
    "acaLicensedStates": ["TX", "FL", "GA"],
    "buyer": {
        "companyName": "Lone Star Health Agency LLC",
        "entityType": "Limited Liability Company",
        "address": "100 Congress Ave, Austin, TX 78701",
        "email": "contracts@lonestar.example",
        "contactName": "Dana Reyes",
        "title": "Managing Director",
    },
    "publisher": {
        "companyName": "Bright Leads Inc.",
        "entityType": "Corporation",
        "address": "55 Market St, San Francisco, CA 94105",
        "email": "ops@brightleads.example",
        "contactName": "Sam Patel",
        "title": "CEO",
    },
}


def check_health(client: httpx.Client) -> bool:
    """Check if API is healthy."""
    try:
        resp = client.get(f"{API_BASE}/health")
        return resp.status_code == 200
    except httpx.RequestError:
        return False


def token_from_link(link: str) -> str:
    return parse_qs(urlparse(link).query)["contract"][0]


def sign(client: httpx.Client, token: str, role: str, name: str) -> dict:
    resp = client.post(
        f"{API_BASE}/api/sign/{token}/{role}",
        json={"signer_name": name, "signature_image": SIGNATURE_PNG},
    )
    resp.raise_for_status()
    return resp.json()


def main():
    parser = argparse.ArgumentParser(description="E2E demo for PPC Contracts")
    parser.add_argument("--out", "-o", type=Path, help="Write the signed document HTML here")
    parser.add_argument("--json", action="store_true", help="Output raw JSON")
    args = parser.parse_args()

    print("=" * 60)
    print("PPC CONTRACTS - E2E DEMO")
    print("=" * 60)

    headers = {"X-Owner-Id": OWNER_ID}
    with httpx.Client(timeout=30.0, headers=headers) as client:
        print("\n[1/5] Checking API health...")
        if not check_health(client):
            print("  Error: API is not responding. Run 'make up' first.")
            sys.exit(1)
        print("  API is healthy")

        print("\n[2/5] Creating draft...")
        try:
            resp = client.post(f"{API_BASE}/api/contracts", json=SAMPLE_REQUEST)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            print(f"  Error creating draft: {e.response.text}")
            sys.exit(1)
        document_id = resp.json()["id"]
        print(f"  Document ID: {document_id}")

        print("\n[3/5] Generating contract...")
        resp = client.post(f"{API_BASE}/api/contracts/{document_id}/generate")
        if resp.status_code != 200:
            print(f"  Error generating: {resp.text}")
            sys.exit(1)
        contract = resp.json()
        token = token_from_link(contract["signing_links"]["buyer"])
        print(f"  Body: {len(contract['body'])} chars")
        for role, link in contract["signing_links"].items():
            print(f"  {role} link: {link}")

        # Publisher first: order must not matter
        print("\n[4/5] Signing as publisher, then buyer...")
        try:
            record = sign(client, token, "publisher", "Sam Patel")
            print(f"  After publisher: {record['status']}")
            record = sign(client, token, "buyer", "Dana Reyes")
            print(f"  After buyer: {record['status']}")
        except httpx.HTTPStatusError as e:
            print(f"  Error signing: {e.response.text}")
            sys.exit(1)

        print("\n[5/5] Fetching signed document...")
        resp = client.get(f"{API_BASE}/api/sign/{token}/document")
        resp.raise_for_status()
        print(f"  Signed document: {len(resp.text)} chars")
        if args.out:
            args.out.write_text(resp.text, encoding="utf-8")
            print(f"  Written to {args.out}")

    print("\n" + "=" * 60)
    print("CONTRACT FULLY SIGNED" if record["status"] == "fully_signed" else "SIGNING INCOMPLETE")
    print("=" * 60)

    if args.json:
        print(json.dumps(record, indent=2, default=str))

    sys.exit(0 if record["status"] == "fully_signed" else 1)


if __name__ == "__main__":
    main()
