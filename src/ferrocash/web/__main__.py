"""
Web entry point.

Usage:
    python -m ferrocash.web
"""

import os

import uvicorn
from dotenv import load_dotenv

from ferrocash.web.app import create_app

if __name__ == "__main__":
    load_dotenv()
    uvicorn.run(
        create_app(),
        host=os.environ.get("FERROCASH_HOST", "127.0.0.1"),
        port=int(os.environ.get("FERROCASH_PORT", "8000")),
        reload=False,
    )
