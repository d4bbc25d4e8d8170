#!/usr/bin/env python3
"""
Development startup script.

Starts the storefront cart service in development mode.
"""

import os
import sys
import shutil
import subprocess
from pathlib import Path

# Project root
PROJECT_ROOT = Path(__file__).parent.parent


def check_dependencies():
    """Check if required dependencies are installed."""
    try:
        import fastapi
        import uvicorn
        import httpx
        import pydantic_settings
        print("✓ All core dependencies installed")
        return True
    except ImportError as e:
        print(f"✗ Missing dependency: {e.name}")
        print("\nRun: pip install -e .")
        return False


def check_redis():
    """Report whether carts will be persisted to Redis."""
    try:
        import redis
    except ImportError:
        print("✗ redis package not installed")
        return False

    if os.environ.get("REDIS_URL"):
        print("✓ Redis cart store configured")
    else:
        print("! REDIS_URL not set in environment, carts may be kept in memory")
    return True


def check_env():
    """Check if .env file exists."""
    env_file = PROJECT_ROOT / "config" / ".env"
    env_example = PROJECT_ROOT / "config" / ".env.example"

    if env_file.exists():
        print("✓ Configuration file found")
        return True
    elif env_example.exists():
        print("! Configuration file not found, copying from example...")
        shutil.copy(env_example, env_file)
        print("✓ Created config/.env from example")
        print("  Please edit config/.env with your WooCommerce credentials")
        return True
    else:
        print("✗ No configuration file found")
        return False


def start_service(port: int = 8000):
    """Start the cart service with auto-reload."""
    print(f"\n🛒 Starting storefront cart service on http://localhost:{port} ...")
    process = subprocess.Popen(
        [
            sys.executable, "-m", "uvicorn",
            "storefront.main:app",
            "--reload",
            "--host", "0.0.0.0",
            "--port", str(port),
        ],
        cwd=PROJECT_ROOT,
    )

    print("\n" + "=" * 60)
    print("Service started successfully!")
    print("=" * 60)
    print(f"\n📍 Cart API:  http://localhost:{port}/api/cart")
    print(f"📍 API docs:  http://localhost:{port}/docs")
    print("\nPress Ctrl+C to stop")
    print("=" * 60)

    try:
        process.wait()
    except KeyboardInterrupt:
        print("\n\nShutting down...")
        process.terminate()
        process.wait()
        print("Service stopped.")


def main():
    print("=" * 60)
    print("IntelliSMART Storefront - Development Server")
    print("=" * 60)

    # Pre-flight checks
    print("\nRunning pre-flight checks...")

    if not check_dependencies():
        sys.exit(1)

    if not check_env():
        sys.exit(1)

    check_redis()

    print("\n✓ All checks passed!")

    start_service(int(os.environ.get("PORT", "8000")))


if __name__ == "__main__":
    main()
