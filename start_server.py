#!/usr/bin/env python3
"""
Startup script for the Taskflow backend
This script starts the FastAPI server with settings taken from the environment
"""

import uvicorn

from taskflow.config import get_settings

def main():
    settings = get_settings()

    print("Starting Taskflow Backend Server...")
    print(f"Host: {settings.host}")
    print(f"Port: {settings.port}")
    print(f"Reload: {settings.reload}")
    print("=" * 50)

    # Start the server
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )

if __name__ == "__main__":
    main()
