from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
from app.core.models import (
    Cart, DomainEvent, Order, OrderStatus, Product, Recipe, RecipeBody, RecipeDraft, RecipeUpdate, SupplierType,
)


class RecipeRepo(ABC):
    @abstractmethod
    def get(self, recipe_id: str) -> Recipe: ...
    @abstractmethod
    def list(self, store_id: str) -> List[Recipe]: ...
    @abstractmethod
    def create(self, draft: RecipeDraft) -> Recipe: ...
    @abstractmethod
    def update(self, recipe_id: str, updates: RecipeUpdate) -> Recipe: ...
    @abstractmethod
    def delete(self, recipe_id: str) -> None: ...
    @abstractmethod
    def import_many(self, store_id: str, drafts: List[RecipeBody]) -> List[Recipe]: ...


class CatalogRepo(ABC):
    @abstractmethod
    def get(self, product_id: str) -> Product: ...
    @abstractmethod
    def all(self) -> List[Product]: ...
    @abstractmethod
    def search(
        self,
        query: str = "",
        category: Optional[str] = None,
        supplier_type: Optional[SupplierType] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]: ...
    @abstractmethod
    def categories(self) -> List[str]: ...

    def supplier_types(self) -> List[SupplierType]:
        return sorted(SupplierType)


class CartRepo(ABC):
    @abstractmethod
    def load(self, store_id: str) -> Cart: ...
    @abstractmethod
    def save(self, store_id: str, cart: Cart) -> None: ...


class OrderRepo(ABC):
    @abstractmethod
    def create(self, store_id: str, cart: Cart, transaction_id: Optional[str] = None,
               status: OrderStatus = "pending") -> Order: ...
    @abstractmethod
    def confirm_payment(self, order_id: str, transaction_id: str) -> Order: ...
    @abstractmethod
    def list(self, store_id: str) -> List[Order]: ...
    @abstractmethod
    def get(self, order_id: str) -> Order: ...
    @abstractmethod
    def update_status(self, order_id: str, status: OrderStatus) -> Order: ...
    @abstractmethod
    def cancel(self, order_id: str) -> Order: ...


class EventRepo(ABC):
    @abstractmethod
    def append(self, event: DomainEvent) -> None: ...
