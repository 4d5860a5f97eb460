"""Repository classes encapsulating database operations.

Each repository is small and focused on a single entity (products,
users). Repositories return SQLModel objects; `save` and `delete` commit
their own single-entity transaction and roll it back on failure.
Driver-level connectivity faults surface as `StorageUnavailableError`
and are not retried.
"""

import logging
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, select

from . import models
from .errors import DuplicateEmailError, StorageUnavailableError

logger = logging.getLogger("company_api.repositories")


@contextmanager
def storage_errors(session: Session):
    """Translate connectivity failures into `StorageUnavailableError`."""
    try:
        yield
    except OperationalError as exc:
        logger.error("storage operation failed: %s", exc.orig)
        session.rollback()
        raise StorageUnavailableError(str(exc.orig)) from exc


class ProductRepository:
    """CRUD and lookup operations for `Product` objects."""
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[models.Product]:
        """Return every product. No ordering is guaranteed."""
        with storage_errors(self.session):
            return list(self.session.exec(select(models.Product)).all())

    def get(self, product_id: int) -> Optional[models.Product]:
        """Get a `Product` by primary key or `None`."""
        with storage_errors(self.session):
            return self.session.get(models.Product, product_id)

    def save(self, product: models.Product) -> models.Product:
        """Insert a new product or update an existing one and return it refreshed."""
        with storage_errors(self.session):
            try:
                self.session.add(product)
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
            self.session.refresh(product)
            return product

    def delete(self, product: models.Product) -> None:
        with storage_errors(self.session):
            try:
                self.session.delete(product)
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise

    def search_by_name(self, name_part: str) -> List[models.Product]:
        """Return products whose name contains `name_part`, ignoring case.

        `%` and `_` in the input are matched literally.
        """
        stmt = select(models.Product).where(
            func.lower(models.Product.name).contains(name_part.lower(), autoescape=True)
        )
        with storage_errors(self.session):
            return list(self.session.exec(stmt).all())

    def list_low_stock(self, threshold: int) -> List[models.Product]:
        """Return products with `stock_quantity <= threshold`."""
        stmt = select(models.Product).where(models.Product.stock_quantity <= threshold)
        with storage_errors(self.session):
            return list(self.session.exec(stmt).all())


class UserRepository:
    """CRUD and lookup operations for `User` objects."""
    def __init__(self, session: Session):
        self.session = session

    def list_all(self) -> List[models.User]:
        """Return every user. No ordering is guaranteed."""
        with storage_errors(self.session):
            return list(self.session.exec(select(models.User)).all())

    def get(self, user_id: int) -> Optional[models.User]:
        """Get a `User` by primary key or `None`."""
        with storage_errors(self.session):
            return self.session.get(models.User, user_id)

    def get_by_email(self, email: str) -> Optional[models.User]:
        """Return a `User` by email or `None` if not found."""
        stmt = select(models.User).where(models.User.email == email)
        with storage_errors(self.session):
            return self.session.exec(stmt).first()

    def exists_by_email(self, email: str) -> bool:
        """Return True if any user already uses `email`."""
        stmt = select(models.User.id).where(models.User.email == email)
        with storage_errors(self.session):
            return self.session.exec(stmt).first() is not None

    def save(self, user: models.User) -> models.User:
        """Insert or update `user`.

        The unique index on `email` rejects a duplicate even when the
        caller's existence check raced with another insert; that case is
        reported as `DuplicateEmailError`.
        """
        email = user.email
        with storage_errors(self.session):
            try:
                self.session.add(user)
                self.session.commit()
            except IntegrityError as exc:
                self.session.rollback()
                if "email" in str(exc.orig).lower():
                    raise DuplicateEmailError(email) from exc
                raise
            except Exception:
                self.session.rollback()
                raise
            self.session.refresh(user)
            return user

    def delete(self, user: models.User) -> None:
        with storage_errors(self.session):
            try:
                self.session.delete(user)
                self.session.commit()
            except Exception:
                self.session.rollback()
                raise
