#!/usr/bin/env python3
"""Scan a bill file through the configured vision model providers."""
import asyncio
import json
import mimetypes
import sys
from pathlib import Path

# Load .env file
from dotenv import load_dotenv
load_dotenv()

from bill_scanner.config import Settings
from bill_scanner.llm.base import TEXT_MIME_TYPE
from bill_scanner.scanner import BillScanner
from bill_scanner.utils.encoding import to_base64
from bill_scanner.utils.logging import setup_logging


async def main(file_path: str) -> None:
    """Scan a single file and print the result."""
    path = Path(file_path)
    if not path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    print(f"Scanning: {path.name} ({mime_type})")
    print("-" * 50)

    settings = Settings()
    setup_logging(settings.log_level, json_logs=False, stream=sys.stderr)
    scanner = BillScanner(settings)

    try:
        status = await scanner.status()
        print(f"Mode: {status.configured}")
        print(f"Active provider: {status.active_provider or 'none'}")

        file_bytes = path.read_bytes()
        if mime_type == TEXT_MIME_TYPE:
            content = file_bytes.decode("utf-8", errors="replace")
        else:
            content = to_base64(file_bytes)

        result = await scanner.scan_with_fallback(content, mime_type)

        print(f"\nSuccess: {result.success}")
        print(f"Provider: {result.provider or '-'}")
        print(f"Confidence: {result.confidence:.0%}")
        for warning in result.warnings:
            print(f"Warning: {warning}")

        output = result.model_dump(mode="json", by_alias=True, exclude={"raw_text"})
        print(json.dumps(output, indent=2, ensure_ascii=False))
    finally:
        await scanner.aclose()

    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python scripts/scan_bill.py <path-to-bill>")
        sys.exit(1)

    asyncio.run(main(sys.argv[1]))
