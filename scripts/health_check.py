#!/usr/bin/env python3
"""
Readiness check for a running StoreLink deployment.
"""

import logging
import os
import sys
from pathlib import Path

import requests
from sqlalchemy import text

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def check_database():
    """Check that the database answers."""
    try:
        from app.database.engine import engine

        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()

        logger.info("Database is reachable")
        return True
    except Exception as e:
        logger.error(f"Database is unreachable: {e}")
        return False


def check_web_app():
    """Check the application's detailed health endpoint."""
    try:
        base_url = os.getenv("APP_BASE_URL", "http://localhost:8000")

        response = requests.get(f"{base_url}/health", timeout=10)
        if response.status_code == 200 and response.json().get("status") == "ok":
            logger.info("Web application is healthy")
            return True

        logger.error(f"Web application is unhealthy: HTTP {response.status_code} {response.text[:200]}")
        return False
    except Exception as e:
        logger.error(f"Web application is unreachable: {e}")
        return False


def main():
    logger.info("Running StoreLink readiness check")

    checks = [
        ("database", check_database),
        ("web application", check_web_app),
    ]

    results = []
    for name, check_func in checks:
        logger.info(f"Checking {name}...")
        results.append((name, check_func()))

    for name, result in results:
        logger.info(f"  {name}: {'OK' if result else 'FAIL'}")

    failed_checks = [name for name, result in results if not result]
    if failed_checks:
        logger.error(f"Unavailable components: {', '.join(failed_checks)}")
        sys.exit(1)

    logger.info("All components are ready")


if __name__ == "__main__":
    main()
