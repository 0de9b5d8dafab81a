from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.author import Author
from app.models.enums import Role


class SqlAuthorsRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, author_id: str) -> Optional[Author]:
        return self.db.get(Author, author_id)

    def get_by_username(self, username: str) -> Optional[Author]:
        return self.db.execute(
            select(Author).where(Author.username == username)
        ).scalar_one_or_none()

    def get_many(self, author_ids: Iterable[str]) -> Dict[str, Author]:
        ids: List[str] = list({author_id for author_id in author_ids if author_id})
        if not ids:
            return {}
        rows = self.db.execute(select(Author).where(Author.id.in_(ids))).scalars().all()
        return {author.id: author for author in rows}

    def list_all(self) -> List[Author]:
        return list(
            self.db.execute(select(Author).order_by(Author.created_at.desc())).scalars().all()
        )

    def count_active_admins(self) -> int:
        return self.db.execute(
            select(func.count())
            .select_from(Author)
            .where(Author.role == Role.ADMIN.value, Author.active.is_(True))
        ).scalar_one()

    def add(self, author: Author) -> Author:
        self.db.add(author)
        self.db.commit()
        self.db.refresh(author)
        return author

    def save(self, author: Author) -> Author:
        self.db.commit()
        self.db.refresh(author)
        return author

    def delete(self, author: Author) -> None:
        self.db.delete(author)
        self.db.commit()
