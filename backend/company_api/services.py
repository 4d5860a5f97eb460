"""Business logic services used by HTTP controllers.

Services are intentionally thin: they look entities up (raising
`NotFoundError` on a miss), apply the few business rules the domain has
and persist through repositories. Payloads arrive already validated by
the schemas in `company_api.schemas`.
"""

import logging
from typing import List

from sqlmodel import Session

from . import models, repositories
from .errors import DuplicateEmailError, NotFoundError
from .schemas import ProductIn, UserIn

logger = logging.getLogger("company_api.services")


class ProductService:
    """Product catalogue operations."""
    def __init__(self, session: Session):
        self.session = session
        self.product_repo = repositories.ProductRepository(session)

    def list_products(self) -> List[models.Product]:
        logger.debug("Fetching all products")
        return self.product_repo.list_all()

    def search_products(self, name: str) -> List[models.Product]:
        """Return products whose name contains `name`, ignoring case.

        Callers route an empty filter to `list_products` instead.
        """
        logger.debug("Searching products with name containing: %s", name)
        return self.product_repo.search_by_name(name)

    def list_low_stock(self, threshold: int) -> List[models.Product]:
        """Return products with at most `threshold` units in stock."""
        logger.debug("Fetching products with stock <= %s", threshold)
        return self.product_repo.list_low_stock(threshold)

    def get_product(self, product_id: int) -> models.Product:
        """Return the product or raise `NotFoundError`."""
        logger.debug("Fetching product with id: %s", product_id)
        product = self.product_repo.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def create_product(self, draft: ProductIn) -> models.Product:
        logger.info("Creating new product: %s", draft.name)
        product = models.Product(**draft.model_dump())
        return self.product_repo.save(product)

    def update_product(self, product_id: int, draft: ProductIn) -> models.Product:
        """Replace every field except the identifier.

        The lookup happens first, so a missing product raises before any
        write.
        """
        logger.info("Updating product with id: %s", product_id)
        product = self.get_product(product_id)
        product.name = draft.name
        product.description = draft.description
        product.price = draft.price
        product.stock_quantity = draft.stock_quantity
        return self.product_repo.save(product)

    def delete_product(self, product_id: int) -> None:
        logger.info("Deleting product with id: %s", product_id)
        product = self.get_product(product_id)
        self.product_repo.delete(product)


class UserService:
    """User registration and maintenance."""
    def __init__(self, session: Session):
        self.session = session
        self.user_repo = repositories.UserRepository(session)

    def list_users(self) -> List[models.User]:
        logger.debug("Fetching all users")
        return self.user_repo.list_all()

    def get_user(self, user_id: int) -> models.User:
        """Return the user or raise `NotFoundError`."""
        logger.debug("Fetching user with id: %s", user_id)
        user = self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def create_user(self, draft: UserIn) -> models.User:
        """Create a user whose email is not yet registered.

        The existence check is a fast path only. Two concurrent requests
        can both pass it; the unique index on `user.email` then rejects
        the second insert and the repository raises the same
        `DuplicateEmailError`.
        """
        logger.info("Creating new user with email: %s", draft.email)
        if self.user_repo.exists_by_email(draft.email):
            logger.warning("Rejected duplicate email: %s", draft.email)
            raise DuplicateEmailError(draft.email)
        user = models.User(name=draft.name, email=draft.email)
        return self.user_repo.save(user)

    def update_user(self, user_id: int, draft: UserIn) -> models.User:
        """Replace name and email.

        Email uniqueness is not re-checked here; a collision with another
        user is still refused by the storage constraint on save.
        """
        logger.info("Updating user with id: %s", user_id)
        user = self.get_user(user_id)
        user.name = draft.name
        user.email = draft.email
        return self.user_repo.save(user)

    def delete_user(self, user_id: int) -> None:
        logger.info("Deleting user with id: %s", user_id)
        user = self.get_user(user_id)
        self.user_repo.delete(user)
