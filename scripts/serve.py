#!/usr/bin/env python3
"""Run the bill scanner API."""
from dotenv import load_dotenv
load_dotenv()

import uvicorn

from bill_scanner.api.app import create_app
from bill_scanner.config import Settings


if __name__ == "__main__":
    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.api_host, port=settings.api_port)
