"""Issue a development access token for the admin API.

Usage:
    uv run python -m scripts.create_access_token <user_id> [minutes] [--mfa]
The token's `sub` is the user ID the engine authorizes; --mfa adds the
`mfa: true` claim. Uses SECRET_KEY from the environment or .env.
"""

import sys
from datetime import timedelta

from app.infrastructure.security.jwt import MFA_CLAIM, create_access_token

USAGE = "Usage: uv run python -m scripts.create_access_token <user_id> [minutes] [--mfa]"


def main() -> None:
    args = [a for a in sys.argv[1:] if a != "--mfa"]
    if not args:
        print(USAGE, file=sys.stderr)
        sys.exit(1)
    user_id = args[0]
    expires = timedelta(minutes=int(args[1])) if len(args) > 1 else None
    claims = {MFA_CLAIM: True} if "--mfa" in sys.argv[1:] else None
    print(create_access_token(user_id, extra_claims=claims, expires_delta=expires))


if __name__ == "__main__":
    main()
