"""Grant the admin role to an existing account.

Usage: python scripts/promote_admin.py user@example.com
"""

import sys
import os

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storefront.domain.models.user import ROLE_ADMIN
from storefront.infrastructure.mongo import get_mongo_client, get_mongo_database
from storefront.infrastructure.repositories.user_repository import MongoUserRepository


def promote(email: str) -> int:
    repo = MongoUserRepository(get_mongo_database())
    try:
        user = repo.get_by_email(email)
        if not user:
            print(f"No account registered with {email}")
            return 1

        if user.is_admin:
            print(f"{email} is already an admin.")
            return 0

        user.role = ROLE_ADMIN
        repo.save(user)
        print(f"{email} is now an admin.")
        return 0
    finally:
        get_mongo_client().close()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__.strip().splitlines()[-1])
        sys.exit(2)
    sys.exit(promote(sys.argv[1]))
