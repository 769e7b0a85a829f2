from __future__ import annotations

import io
import json
import logging
import os
import tempfile
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, List, Optional

from app.config import Settings
from app.core.cart import empty_cart
from app.core.models import (
    Cart, DomainEvent, Order, OrderStatus, Product, Recipe, RecipeBody, RecipeDraft, RecipeUpdate, SupplierType,
)
from app.services.exceptions import BusinessRuleError, NotFoundError, RepoError
from app.services.faults import FaultInjector
from .base import CartRepo, CatalogRepo, EventRepo, OrderRepo, RecipeRepo
from .seed import SEED_PRODUCTS, SEED_RECIPES

log = logging.getLogger("app.repo")

# Cross-platform file lock (fcntl for *nix; msvcrt for Windows)
@contextmanager
def _locked(path: str) -> Iterator[io.FileIO]:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    f = open(path, "a+b")  # create if missing
    try:
        try:
            import fcntl  # type: ignore
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            locker = ("fcntl", None)
        except ImportError:
            try:
                import msvcrt  # type: ignore
                msvcrt.locking(f.fileno(), msvcrt.LK_LOCK, 1)
                locker = ("msvcrt", 1)
            except (ImportError, OSError) as e:
                f.close()
                raise RepoError(f"Could not lock file {path}: {e}") from e
        yield f
    finally:
        try:
            if locker[0] == "fcntl":
                import fcntl  # type: ignore
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
            else:
                import msvcrt  # type: ignore
                msvcrt.locking(f.fileno(), msvcrt.LK_UNLCK, locker[1])
        except (NameError, OSError):
            pass
        f.close()


def _atomic_write(path: str, data: bytes) -> None:
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=d)
    try:
        with os.fdopen(fd, "wb") as w:
            w.write(data)
            w.flush()
            os.fsync(w.fileno())
        os.replace(tmp, path)
    except OSError as e:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise RepoError(f"Atomic write failed for {path}: {e}") from e


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:9]}"


class _JSONDocument:
    """A whole-file JSON document, optionally seeded when the file is missing."""

    def __init__(self, path: str, seed: Any):
        self.path = path
        self._seed = seed

    def _fresh_seed(self) -> Any:
        # callers mutate what they read; never hand out the shared seed
        return json.loads(json.dumps(self._seed))

    def read(self) -> Any:
        try:
            if not os.path.exists(self.path):
                return self._fresh_seed()
            with _locked(self.path) as f:
                f.seek(0)
                raw = f.read() or b"null"
            obj = json.loads(raw.decode("utf-8"))
            return self._fresh_seed() if obj is None else obj
        except (OSError, ValueError) as e:
            log.error("failed to load %s: %s", self.path, e)
            raise RepoError(f"Failed to load {self.path}: {e}") from e

    def write(self, obj: Any) -> None:
        try:
            payload = json.dumps(obj, ensure_ascii=False, separators=(",", ":"), default=str).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise RepoError(f"Failed to serialize {self.path}: {e}") from e
        _atomic_write(self.path, payload)

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """
        Read, let the caller change the object in place, write it back.

        The data file itself is swapped by `_atomic_write`, so writers serialize
        on a sidecar `.lock` file that outlives the swap. Nothing is written if
        the block raises.
        """
        with _locked(f"{self.path}.lock"):
            obj = self.read()
            yield obj
            self.write(obj)


class JSONRecipeRepo(RecipeRepo):
    def __init__(self, settings: Settings, faults: Optional[FaultInjector] = None):
        self._doc = _JSONDocument(settings.recipes_file, {"recipes": SEED_RECIPES})
        self._faults = faults or FaultInjector(settings)

    @staticmethod
    def _parse(doc: Any) -> List[Recipe]:
        try:
            return [Recipe(**r) for r in doc.get("recipes", [])]
        except (TypeError, ValueError) as e:
            raise RepoError(f"Recipe store is corrupt: {e}") from e

    def _load_all(self) -> List[Recipe]:
        return self._parse(self._doc.read())

    @contextmanager
    def _editing(self) -> Iterator[List[Recipe]]:
        with self._doc.transaction() as doc:
            recipes = self._parse(doc)
            yield recipes
            doc["recipes"] = [r.model_dump(mode="json") for r in recipes]

    def get(self, recipe_id: str) -> Recipe:
        self._faults.check("fetch_recipe")
        for r in self._load_all():
            if r.id == recipe_id:
                return r
        raise NotFoundError(f"Recipe not found: {recipe_id}", code="RECIPE_NOT_FOUND")

    def list(self, store_id: str) -> List[Recipe]:
        self._faults.check("fetch_recipes")
        return [r for r in self._load_all() if r.store_id == store_id]

    def create(self, draft: RecipeDraft) -> Recipe:
        self._faults.check("create_recipe")
        recipe = Recipe(**draft.model_dump(), id=_new_id("recipe"))
        with self._editing() as recipes:
            recipes.append(recipe)
        return recipe

    def update(self, recipe_id: str, updates: RecipeUpdate) -> Recipe:
        self._faults.check("update_recipe")
        changes = updates.model_dump(exclude_unset=True, exclude_none=True)
        if "items" in changes:
            changes["items"] = updates.items
        with self._editing() as recipes:
            for i, r in enumerate(recipes):
                if r.id == recipe_id:
                    recipes[i] = r.model_copy(update={**changes, "updated_at": datetime.utcnow()})
                    return recipes[i]
            raise NotFoundError(f"Recipe not found: {recipe_id}", code="RECIPE_NOT_FOUND")

    def delete(self, recipe_id: str) -> None:
        self._faults.check("delete_recipe")
        with self._editing() as recipes:
            kept = [r for r in recipes if r.id != recipe_id]
            if len(kept) == len(recipes):
                raise NotFoundError(f"Recipe not found: {recipe_id}", code="RECIPE_NOT_FOUND")
            recipes[:] = kept

    def import_many(self, store_id: str, drafts: List[RecipeBody]) -> List[Recipe]:
        self._faults.check("import_recipes")
        imported = [
            Recipe(**{**d.model_dump(), "store_id": store_id}, id=_new_id("recipe"))
            for d in drafts
        ]
        with self._editing() as recipes:
            recipes.extend(imported)
        return imported


class JSONCatalogRepo(CatalogRepo):
    """Catalog snapshot backed by a JSON file. Read-only through this interface."""

    def __init__(self, settings: Settings, faults: Optional[FaultInjector] = None):
        self._doc = _JSONDocument(settings.catalog_file, {"products": SEED_PRODUCTS})
        self._faults = faults or FaultInjector(settings)

    def _load_all(self) -> List[Product]:
        try:
            return [Product(**p) for p in self._doc.read().get("products", [])]
        except (TypeError, ValueError) as e:
            raise RepoError(f"Catalog store is corrupt: {e}") from e

    def get(self, product_id: str) -> Product:
        self._faults.check("get_product")
        for p in self._load_all():
            if p.id == product_id:
                return p
        raise NotFoundError(f"Product not found: {product_id}", code="PRODUCT_NOT_FOUND")

    def all(self) -> List[Product]:
        self._faults.check("list_products")
        return self._load_all()

    def search(
        self,
        query: str = "",
        category: Optional[str] = None,
        supplier_type: Optional[SupplierType] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]:
        """
        Any whitespace-separated term hitting brand, spec or category keeps a
        product. Results are ordered by supplier preference.
        """
        self._faults.check("search_products")
        results = self._load_all()
        terms = [t for t in (query or "").casefold().split() if t]
        if terms:
            results = [
                p for p in results
                if any(
                    t in p.brand.casefold() or t in p.spec.casefold() or t in (p.category or "").casefold()
                    for t in terms
                )
            ]
        if category:
            results = [p for p in results if p.category == category]
        if supplier_type:
            results = [p for p in results if p.supplier_type == supplier_type]
        if min_price is not None:
            results = [p for p in results if p.price >= min_price]
        if max_price is not None:
            results = [p for p in results if p.price <= max_price]
        results.sort(key=lambda p: p.supplier_type)
        return results

    def categories(self) -> List[str]:
        self._faults.check("get_categories")
        return sorted({p.category for p in self._load_all() if p.category})


class JSONCartRepo(CartRepo):
    """One cart per store, all kept in a single JSON object keyed by store id."""

    def __init__(self, settings: Settings):
        self._doc = _JSONDocument(settings.carts_file, {})
        self._shipping_fee = settings.shipping_fee

    def load(self, store_id: str) -> Cart:
        raw = self._doc.read().get(store_id)
        if raw is None:
            return empty_cart(self._shipping_fee)
        try:
            return Cart(**raw)
        except (TypeError, ValueError) as e:
            raise RepoError(f"Cart for {store_id} is corrupt: {e}") from e

    def save(self, store_id: str, cart: Cart) -> None:
        with self._doc.transaction() as carts:
            carts[store_id] = cart.model_dump(mode="json")


class JSONOrderRepo(OrderRepo):
    def __init__(self, settings: Settings, faults: Optional[FaultInjector] = None):
        self._doc = _JSONDocument(settings.orders_file, {"orders": []})
        self._faults = faults or FaultInjector(settings)

    @staticmethod
    def _parse(doc: Any) -> List[Order]:
        try:
            return [Order(**o) for o in doc.get("orders", [])]
        except (TypeError, ValueError) as e:
            raise RepoError(f"Order store is corrupt: {e}") from e

    def _load_all(self) -> List[Order]:
        return self._parse(self._doc.read())

    @contextmanager
    def _editing(self) -> Iterator[List[Order]]:
        with self._doc.transaction() as doc:
            orders = self._parse(doc)
            yield orders
            doc["orders"] = [o.model_dump(mode="json") for o in orders]

    def _replace(self, order_id: str, check=None, **changes) -> Order:
        with self._editing() as orders:
            for i, o in enumerate(orders):
                if o.id == order_id:
                    if check is not None:
                        check(o)
                    orders[i] = o.model_copy(update={**changes, "updated_at": datetime.utcnow()})
                    return orders[i]
            raise NotFoundError(f"Order not found: {order_id}", code="ORDER_NOT_FOUND")

    def create(
        self,
        store_id: str,
        cart: Cart,
        transaction_id: Optional[str] = None,
        status: OrderStatus = "pending",
    ) -> Order:
        self._faults.check("create_order")
        stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
        order = Order(
            id=_new_id("order"),
            store_id=store_id,
            cart_snapshot=cart.model_copy(deep=True),
            status=status,
            invoice_no=f"INV-{stamp}",
            tracking_no=f"TRK-{stamp}",
            transaction_id=transaction_id,
        )
        with self._editing() as orders:
            orders.append(order)
        return order

    def confirm_payment(self, order_id: str, transaction_id: str) -> Order:
        self._faults.check("confirm_payment")
        return self._replace(order_id, status="pending", transaction_id=transaction_id)

    def list(self, store_id: str) -> List[Order]:
        self._faults.check("get_orders")
        orders = [o for o in self._load_all() if o.store_id == store_id]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def get(self, order_id: str) -> Order:
        self._faults.check("get_order")
        for o in self._load_all():
            if o.id == order_id:
                return o
        raise NotFoundError(f"Order not found: {order_id}", code="ORDER_NOT_FOUND")

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        self._faults.check("update_order_status")
        return self._replace(order_id, status=status)

    def cancel(self, order_id: str) -> Order:
        self._faults.check("cancel_order")
        return self._replace(order_id, check=_not_delivered, status="cancelled")


def _not_delivered(order: Order) -> None:
    if order.status == "delivered":
        raise BusinessRuleError("Delivered orders cannot be cancelled", code="ORDER_ALREADY_DELIVERED")


class JSONEventRepo(EventRepo):
    def __init__(self, settings: Settings):
        self.path = settings.events_file

    def append(self, event: DomainEvent) -> None:
        try:
            line = (json.dumps(event.model_dump(), ensure_ascii=False, separators=(",", ":"), default=str) + "\n").encode("utf-8")
            with _locked(self.path) as f:
                f.seek(0, os.SEEK_END)
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except (OSError, TypeError, ValueError) as e:
            raise RepoError(f"Failed to append event to {self.path}: {e}") from e
