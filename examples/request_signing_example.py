#!/usr/bin/env python3
"""
EdgeGrid Python SDK - Request Signing Example

Shows how to sign requests with EG1-HMAC-SHA256, inspect the intermediate
strings, and send signed requests through requests or httpx.
"""

import asyncio
import io
import json
from datetime import datetime, timezone

import httpx
import requests

from edgegrid_auth import (
    ClientCredential,
    EdgeGridAuth,
    EdgeGridSDKError,
    EdgeGridV1Signer,
    HttpMethod,
    HttpxTransport,
    SignableRequest,
    SigningConfigBuilder,
    create_signing_config,
)
from edgegrid_auth.signing import SigningContext

BASE_URL = "https://akab-example.luna.akamaiapis.net"

credential = ClientCredential(
    client_token="akab-client-token-xxx",
    access_token="akab-access-token-xxx",
    secret="client-secret-xxx"
)


def basic_signing_example():
    """Sign a GET request and print the header"""
    print("=== Basic Request Signing Example ===")

    signer = EdgeGridV1Signer(create_signing_config(headers=["X-Request-Id"]))
    request = SignableRequest(
        method=HttpMethod.GET,
        url=f"{BASE_URL}/diagnostic-tools/v1/locations?limit=5",
        headers={"X-Request-Id": "  example   request  "}
    )

    signer.sign(request, credential)
    print(f"Authorization: {request.headers['Authorization']}")


def reproducible_signing_example():
    """Fix the timestamp and nonce to inspect the signed strings"""
    print("\n=== Reproducible Signing Example ===")

    config = (SigningConfigBuilder()
              .with_header("X-Request-Id")
              .with_max_body_hash_size(1024)
              .build())
    signer = EdgeGridV1Signer(config)

    context = SigningContext(
        timestamp=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        nonce="0123456789abcdef0123456789abcdef"
    )
    body = io.BytesIO(json.dumps({"name": "example"}).encode('utf-8'))
    request = SignableRequest(HttpMethod.POST, f"{BASE_URL}/papi/v1/groups")

    result = signer.create_authorization(request, credential, body, context)

    print(f"Canonical request: {result.canonical_request!r}")
    print(f"Auth data:         {result.auth_data}")
    print(f"Signature:         {result.signature}")


def requests_example():
    """Attach the signer to a requests call"""
    print("\n=== requests Integration Example ===")

    prepared = requests.Request(
        "POST",
        f"{BASE_URL}/papi/v1/properties",
        json={"propertyName": "example"},
        auth=EdgeGridAuth(credential)
    ).prepare()
    print(f"Authorization: {prepared.headers['Authorization'][:60]}...")


async def httpx_example():
    """Sign and send through the async httpx transport"""
    print("\n=== httpx Transport Example ===")

    async with HttpxTransport(timeout=10.0) as transport:
        signer = EdgeGridV1Signer(transport=transport)
        request = SignableRequest(HttpMethod.GET, f"{BASE_URL}/diagnostic-tools/v1/locations")
        try:
            response = await signer.execute(request, credential)
            print(f"Status: {response.status_code}")
        except httpx.HTTPError as e:
            print(f"Request failed: {type(e).__name__}: {e}")


def error_handling_example():
    """Show the errors raised for bad input"""
    print("\n=== Error Handling Example ===")

    try:
        ClientCredential("", "access", "secret")
    except EdgeGridSDKError as e:
        print(f"Empty client token: {e}")

    try:
        create_signing_config(max_body_hash_size=-1)
    except EdgeGridSDKError as e:
        print(f"Negative body hash size: {e}")

    try:
        SignableRequest(HttpMethod.GET, "not-a-url")
    except EdgeGridSDKError as e:
        print(f"Invalid URL: {e}")

    try:
        signer = EdgeGridV1Signer()
        signer.sign(
            SignableRequest(HttpMethod.POST, f"{BASE_URL}/upload"),
            credential,
            io.StringIO("text is not accepted")
        )
    except EdgeGridSDKError as e:
        print(f"Text body stream: {e}")


def main():
    """Run all examples"""
    print("EdgeGrid Python SDK - Request Signing Examples")
    print("=" * 50)

    basic_signing_example()
    reproducible_signing_example()
    requests_example()
    asyncio.run(httpx_example())
    error_handling_example()


if __name__ == "__main__":
    main()
