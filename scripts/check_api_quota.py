#!/usr/bin/env python3
"""Check the configured Gemini API key and explain quota-related failures.

Usage:
  ./venv/bin/python scripts/check_api_quota.py
  ./venv/bin/python scripts/check_api_quota.py --api-key AIza... --burst 5
"""

from __future__ import annotations

import argparse
import os
import time

from dotenv import load_dotenv

from study_companion.services.generation_client import (
    GenerationAuthError,
    GenerationError,
    GenerationOptions,
    GenerationRateLimited,
    GenerationUnavailable,
    GeminiGenerationClient,
)

EXPLANATIONS = {
    GenerationUnavailable: (
        "Status 503: service temporarily unavailable. Google's servers are overloaded; "
        "wait 1-5 minutes and try again."
    ),
    GenerationRateLimited: (
        "Status 429: rate limit exceeded. Wait about a minute for the per-minute quota to reset."
    ),
    GenerationAuthError: (
        "Status 401/403: daily quota exceeded or the API key is invalid. Check the key or wait until tomorrow."
    ),
}


def explain(exc: GenerationError) -> str:
    for error_type, message in EXPLANATIONS.items():
        if isinstance(exc, error_type):
            return message
    return f"Status {exc.status_code or 'unknown'}: {exc}"


def build_client(api_key: str, model: str) -> GeminiGenerationClient:
    from google import genai

    return GeminiGenerationClient(genai.Client(api_key=api_key), model)


def run_checks(client: GeminiGenerationClient, burst: int) -> int:
    print("Test 1: basic connectivity...")
    started = time.time()
    try:
        client.ping(timeout_ms=10000)
    except GenerationError as exc:
        print(f"[FAIL] {explain(exc)}")
        return 1
    print(f"[PASS] API is working ({int((time.time() - started) * 1000)}ms)")

    if burst <= 0:
        return 0
    print("")
    print(f"Test 2: {burst} rapid requests...")
    options = GenerationOptions(temperature=0.1, max_output_tokens=5, timeout_ms=5000)
    successes = 0
    failures = []
    for index in range(burst):
        try:
            client.generate(f"Test {index + 1}", options)
            successes += 1
        except GenerationError as exc:
            failures.append(exc)
    print(f"Successful: {successes}/{burst}")
    for exc in failures[:3]:
        print(f"  {explain(exc)}")
    if failures:
        print("Rapid requests are being limited; the free tier allows roughly 15 requests per minute.")
    return 0


def main() -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Check Gemini API key status and quota.")
    parser.add_argument("--api-key", default="", help="Gemini API key (defaults to GEMINI_API_KEY)")
    parser.add_argument("--model", default=os.getenv("GEMINI_MODEL", "gemini-2.5-flash-lite"))
    parser.add_argument("--burst", default=5, type=int, help="Number of rapid requests for the rate limit check")
    args = parser.parse_args()

    api_key = args.api_key.strip() or os.getenv("GEMINI_API_KEY", "").strip()
    if not api_key:
        print("No API key provided. Set GEMINI_API_KEY or pass --api-key.")
        return 2
    return run_checks(build_client(api_key, args.model), args.burst)


if __name__ == "__main__":
    raise SystemExit(main())
