# storefront/services/catalog_service.py
import uuid

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.errors import ProductNotFound
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def parse_canonical_id(reference) -> uuid.UUID | None:
    if not isinstance(reference, str):
        return None
    try:
        return uuid.UUID(reference.strip())
    except ValueError:
        return None


_MAX_LEGACY_ID = 2**31 - 1


def parse_legacy_id(reference) -> int | None:
    if isinstance(reference, bool):
        return None
    if isinstance(reference, int):
        value = reference
    elif isinstance(reference, str):
        try:
            value = int(reference.strip(), 10)
        except ValueError:
            return None
    else:
        return None
    # stare id to dodatnie INTEGER z bazy
    if not 0 < value <= _MAX_LEGACY_ID:
        return None
    return value


class CatalogResolver:
    """
    Rozwiazuje referencje produktu w dwoch schematach id:
    1. kanoniczne UUID (jesli referencja ma taki format)
    2. stare numeryczne id z seeda
    Tylko odczyt.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    def resolve(self, reference) -> ProductModel:
        product = None

        canonical = parse_canonical_id(reference)
        if canonical is not None:
            product = self.repo.get_by_id(canonical)

        if product is None:
            legacy = parse_legacy_id(reference)
            if legacy is not None:
                product = self.repo.get_by_legacy_id(legacy)

        if product is None:
            logger.info(f"Product not found for reference {reference!r} ({type(reference).__name__})")
            raise ProductNotFound(reference)

        return product

    def list_products(self, category=None, featured=None, include_unavailable=False):
        return self.repo.list_products(
            category=category,
            featured=featured,
            include_unavailable=include_unavailable,
        )
