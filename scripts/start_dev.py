#!/usr/bin/env python3
"""
Development startup script.

Runs pre-flight checks and starts the storefront in development mode, where
OTP codes are logged and echoed back in the send-otp response.
"""

import os
import shutil
import subprocess
import sys
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent

STOREFRONT_PORT = 8001


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import jwt
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e '.[test]'")
        return False


def check_env():
    """Check if .env file exists, creating it from the example if needed."""
    env_file = PROJECT_ROOT / "config" / ".env"
    env_example = PROJECT_ROOT / "config" / ".env.example"

    if env_file.exists():
        print("✓ Configuration file found")
        return True
    elif env_example.exists():
        print("! Configuration file not found, copying from example...")
        shutil.copy(env_example, env_file)
        print("✓ Created config/.env from example")
        print("  Set SESSION_SECRET and the SMS gateway before running outside development")
        return True
    else:
        print("✗ No configuration file found")
        return False


def start_storefront():
    """Start the storefront with auto-reload."""
    print(f"\n🛒 Starting Storefront on http://localhost:{STOREFRONT_PORT} ...")
    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn",
            "storefront.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", str(STOREFRONT_PORT),
        ],
        cwd=PROJECT_ROOT,
        env={**os.environ, "ENVIRONMENT": os.environ.get("ENVIRONMENT", "development")},
    )

    print("\n" + "=" * 60)
    print("Storefront started!")
    print("=" * 60)
    print(f"\n📍 Storefront API: http://localhost:{STOREFRONT_PORT}/docs")
    print(f"📍 Health:         http://localhost:{STOREFRONT_PORT}/health")
    print("\nShopper client: python -m shopper.main")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        process.terminate()
        process.wait()
        print("Storefront stopped.")


def main():
    print("=" * 60)
    print("Grama Groceries - Development Server")
    print("=" * 60)

    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    if not check_env():
        sys.exit(1)

    print("\n✓ All checks passed!")

    start_storefront()


if __name__ == "__main__":
    main()
