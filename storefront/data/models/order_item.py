from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Uuid
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid, nullable=False)

    # kopia linii koszyka, nigdy nie odswiezana z katalogu
    name = Column(String(120), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=True)
    quantity = Column(Integer, nullable=False)

    order = relationship("OrderModel", back_populates="items")
