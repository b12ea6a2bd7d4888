#!/usr/bin/env python3
"""
Startup script for Strava Stats.
This script provides an easy way to run the application with different configurations.
"""

import argparse
import sys
from pathlib import Path

# Add the project directory to Python path
sys.path.insert(0, str(Path(__file__).parent))

def main():
    parser = argparse.ArgumentParser(description="Run Strava Stats application")
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level (default: info)"
    )

    args = parser.parse_args()

    # Check if .env file exists
    if not Path(".env").exists():
        print("⚠️  Warning: .env file not found!")
        print("📝 Client ID and Client Secret can still be entered through PUT /api/v1/credentials.")
        print("🔗 Get your credentials at: https://www.strava.com/settings/api")
        print()

    # Tokens and credentials are stored here
    Path("data").mkdir(parents=True, exist_ok=True)

    print("🏃‍♂️ Starting Strava Stats...")
    print(f"🌐 Server will be available at: http://{args.host}:{args.port}")
    print(f"🔑 Connect to Strava at: http://{args.host}:{args.port}/api/v1/auth/connect")
    print(f"📚 API Documentation: http://{args.host}:{args.port}/docs")
    print()

    try:
        import uvicorn
        # A single worker: the Strava session lives in process memory
        uvicorn.run(
            "strava_stats.main:app",
            host=args.host,
            port=args.port,
            reload=args.reload,
            log_level=args.log_level,
            access_log=True
        )
    except ImportError:
        print("❌ Error: uvicorn not installed!")
        print("📦 Install dependencies with: pip install -e .")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n👋 Shutting down Strava Stats...")


if __name__ == "__main__":
    main()
