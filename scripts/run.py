#!/usr/bin/env python3
"""
TestPlan Agent Startup Script
"""

import secrets
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


def generate_env_file():
    """Generate .env file with a random encryption passphrase if it doesn't exist"""
    env_path = Path(__file__).parent.parent / ".env"
    env_example = Path(__file__).parent.parent / ".env.example"

    if env_path.exists():
        return

    if not env_example.exists():
        print("Warning: .env.example not found, using default configuration")
        return

    content = env_example.read_text()
    content = content.replace(
        "ENCRYPTION_KEY=change-this-to-a-random-passphrase",
        f"ENCRYPTION_KEY={secrets.token_urlsafe(48)}",
    )
    env_path.write_text(content)
    print("Generated .env file with random encryption key")


def main():
    import uvicorn

    generate_env_file()

    from testplan_agent.config import settings

    print(f"""
    TestPlan AI Agent backend

      API server:    http://{settings.HOST}:{settings.PORT}
      Health check:  http://{settings.HOST}:{settings.PORT}/api/health
      Data dir:      {settings.DATA_DIR}

    Press CTRL+C to stop
    """)

    uvicorn.run(
        "testplan_agent.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level="info",
        access_log=True,
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
