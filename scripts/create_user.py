"""Create a login account for CREDENTIAL_BACKEND=database.

Usage:
    python scripts/create_user.py <username> <password>
"""

import asyncio
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mathapi.auth.credentials import create_user_account
from mathapi.config import get_settings
from mathapi.database import build_engine, build_session_factory, create_tables


async def main(username: str, password: str) -> None:
    engine = build_engine(get_settings())
    try:
        await create_tables(engine)
        session_factory = build_session_factory(engine)
        async with session_factory() as session:
            account = await create_user_account(session, username, password)
        print(f"Created user '{account.username}' (id={account.id})")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(sys.argv[1], sys.argv[2]))
