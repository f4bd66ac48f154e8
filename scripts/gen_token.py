"""Issue a bearer token for local testing.

Uses JWT_SECRET_KEY / JWT_ALGORITHM / TOKEN_EXPIRE_HOURS from the environment.

Usage:
    python scripts/gen_token.py [username]
"""

import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from mathapi.auth.tokens import TokenService
from mathapi.config import get_settings

username = sys.argv[1] if len(sys.argv) > 1 else "admin"

token = TokenService.from_settings(get_settings()).issue(username)
with open("token.txt", "w") as f:
    f.write(token)
print("Token written to token.txt")
