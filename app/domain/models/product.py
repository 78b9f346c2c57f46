"""Product domain model: maps to the 'products' table."""

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from app.infrastructure.database import Base


class Product(Base):
    __tablename__ = "products"

    # Product code from the article spreadsheet (codart)
    id = Column(String(64), primary_key=True)

    name = Column(Text, nullable=False, index=True)
    family = Column(String(200), nullable=True, index=True)
    subfamily = Column(String(200), nullable=True)

    # Price lists; price_4 is the special list
    price_1 = Column(Float, nullable=False, default=0)
    price_2 = Column(Float, nullable=False, default=0)
    price_3 = Column(Float, nullable=False, default=0)
    price_4 = Column(Float, nullable=False, default=0)

    stock = Column(Integer, nullable=False, default=0)

    supplier = Column(String(200), nullable=True)
    is_dollar = Column(Boolean, nullable=False, default=False)
    exchange_rate = Column(Float, nullable=True)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Product {self.id} - {self.name}>"
