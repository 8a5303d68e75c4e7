# storefront/repos/product_repo.py
import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, product_id: uuid.UUID) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_by_legacy_id(self, legacy_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.legacy_id == legacy_id)
        ).scalar_one_or_none()

    def list_products(
        self,
        category: str | None = None,
        featured: bool | None = None,
        include_unavailable: bool = False,
    ) -> list[ProductModel]:
        stmt = select(ProductModel)
        if category:
            stmt = stmt.where(ProductModel.category == category)
        if featured is not None:
            stmt = stmt.where(ProductModel.featured == featured)
        if not include_unavailable:
            stmt = stmt.where(ProductModel.available.is_(True))
        stmt = stmt.order_by(ProductModel.category, ProductModel.legacy_id, ProductModel.name)
        return list(self.db.execute(stmt).scalars().all())

    def add_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product
