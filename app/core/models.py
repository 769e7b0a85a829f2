# app/core/models.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------- Units ----------

class Unit(str, Enum):
    """Units a recipe ingredient can be written in."""
    G = "g"
    ML = "ml"
    COUNT = "count"
    TABLESPOON = "tablespoon"
    TEASPOON = "teaspoon"

    @property
    def is_spoon(self) -> bool:
        return self in (Unit.TABLESPOON, Unit.TEASPOON)


class StdUnit(str, Enum):
    G = "g"
    ML = "ml"
    COUNT = "count"


class ProductUnit(str, Enum):
    """Units a catalog product is sold in."""
    G = "g"
    ML = "ml"
    COUNT = "count"
    KG = "kg"
    L = "L"


# ---------- Supplier tiers ----------

class SupplierType(str, Enum):
    """
    Pricing tier of a product. Declaration order is the preference order:
    contract < wholesale < retail.
    """
    CONTRACT = "contract"
    WHOLESALE = "wholesale"
    RETAIL = "retail"

    @property
    def rank(self) -> int:
        return _SUPPLIER_ORDER.index(self)

    @property
    def label(self) -> str:
        return _SUPPLIER_LABELS[self]

    @classmethod
    def from_label(cls, label: str) -> "SupplierType":
        for member, lbl in _SUPPLIER_LABELS.items():
            if lbl == label:
                return member
        return cls(label)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SupplierType):
            return NotImplemented
        return self.rank < other.rank


_SUPPLIER_ORDER = [SupplierType.CONTRACT, SupplierType.WHOLESALE, SupplierType.RETAIL]
_SUPPLIER_LABELS = {
    SupplierType.CONTRACT: "계약가",
    SupplierType.WHOLESALE: "도매",
    SupplierType.RETAIL: "소매",
}


# ---------- Recipes ----------

class RecipeItem(BaseModel):
    """A single ingredient line of a recipe."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Ingredient name as written in the recipe")
    base_qty: float = Field(..., gt=0, description="Quantity for the recipe's base servings")
    unit: Unit
    alt_names: List[str] = Field(default_factory=list, description="Synonyms used for catalog matching")
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("RecipeItem.name cannot be blank")
        return v


class ScaledItem(RecipeItem):
    """RecipeItem with its quantity adjusted for a serving count."""
    scaled_qty: float = Field(..., ge=0)
    std_unit: StdUnit


class RecipeBody(BaseModel):
    name: str = Field(..., min_length=1)
    category: str = ""
    base_servings: int = Field(..., ge=1)
    items: List[RecipeItem] = Field(default_factory=list)


class RecipeDraft(RecipeBody):
    """Recipe payload before the repository assigns identity and timestamps."""
    store_id: str


class Recipe(RecipeDraft):
    id: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class RecipeUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    base_servings: Optional[int] = Field(None, ge=1)
    items: Optional[List[RecipeItem]] = None


# ---------- Catalog ----------

class Product(BaseModel):
    """A purchasable catalog entry. Read-only to the pipeline."""
    model_config = ConfigDict(frozen=True)

    id: str
    supplier_type: SupplierType
    brand: str
    spec: str
    unit: ProductUnit
    pack_size: float = Field(..., gt=0)
    moq: float = Field(0, ge=0)
    price: float = Field(..., ge=0)
    lead_time_days: int = Field(0, ge=0)
    category: Optional[str] = None

    @field_validator("supplier_type", mode="before")
    @classmethod
    def _accept_supplier_label(cls, v):
        if isinstance(v, str):
            return SupplierType.from_label(v)
        return v

    @property
    def display_name(self) -> str:
        return f"{self.brand} {self.spec}"


class MatchResult(BaseModel):
    ingredient_name: str
    candidates: List[Product] = Field(default_factory=list, max_length=5)
    selected_product_id: Optional[str] = None
    effective_qty: float = Field(..., ge=0)
    quantity_packs: Optional[int] = Field(None, ge=1)
    warning: Optional[str] = None
    reason: Optional[str] = None  # scoring trail of the selected product, e.g. "exact:목살+supplier:contract"


# ---------- Cart ----------

class CartItem(BaseModel):
    product_id: str
    display_name: str
    pack_size: float = Field(..., gt=0)
    unit_price: float = Field(..., ge=0)
    quantity_packs: int = Field(..., ge=1)
    subtotal: float = Field(..., ge=0)
    product: Product

    @classmethod
    def for_product(cls, product: Product, quantity_packs: int) -> "CartItem":
        return cls(
            product_id=product.id,
            display_name=product.display_name,
            pack_size=product.pack_size,
            unit_price=product.price,
            quantity_packs=quantity_packs,
            subtotal=quantity_packs * product.price,
            product=product,
        )


class CartTotals(BaseModel):
    subtotal: float = 0
    tax: float = 0
    shipping_fee: float = 0
    total: float = 0


class Cart(CartTotals):
    items: List[CartItem] = Field(default_factory=list)
    delivery_date: Optional[str] = None
    memo: Optional[str] = None


# ---------- Orders & payment ----------

OrderStatus = Literal["awaiting_payment", "pending", "confirmed", "shipped", "delivered", "cancelled"]


class Order(BaseModel):
    id: str
    store_id: str
    cart_snapshot: Cart
    status: OrderStatus = "pending"
    invoice_no: str
    tracking_no: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class PaymentResult(BaseModel):
    success: bool
    transaction_id: Optional[str] = None
    error: Optional[str] = None


# ---------- Auditing / events ----------

class DomainEvent(BaseModel):
    ts: datetime = Field(default_factory=datetime.utcnow)
    type: Literal["recipe", "cart", "order"]
    payload: dict
    schema_version: int = 1
