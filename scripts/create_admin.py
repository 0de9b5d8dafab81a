import argparse
import getpass
import logging

from app.db.postgres.base import SessionLocal, init_db
from app.errors import CmsError
from app.models.enums import Role
from app.repos.authors_repo import SqlAuthorsRepo
from app.repos.posts_repo import SqlPostsRepo
from app.schemas.authors import CreateAuthorRequest
from app.services.authors_service import AuthorsService

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Create an admin author")
    parser.add_argument("--username", required=True)
    parser.add_argument("--full-name", required=True)
    parser.add_argument("--email", default=None)
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    password = getpass.getpass("Password: ")

    init_db()
    session = SessionLocal()
    try:
        service = AuthorsService(repo=SqlAuthorsRepo(session), posts_repo=SqlPostsRepo(session))
        admin = service.create_author(
            CreateAuthorRequest(
                username=args.username,
                fullName=args.full_name,
                password=password,
                bio="Site Administrator",
                role=Role.ADMIN,
                social={"email": args.email},
            )
        )
        logger.info(f"Admin {admin.username} created with id {admin.id}")
    except CmsError as e:
        logger.error(f"Could not create admin: {e.message}")
        raise SystemExit(1)
    except Exception as e:
        logger.error(f"Admin creation failed: {e}", exc_info=True)
        raise SystemExit(1)
    finally:
        session.close()
