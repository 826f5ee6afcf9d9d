from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, fields, replace
from datetime import datetime
from typing import Any, Optional, Union

from mill.models import (
    AppSettings,
    Customer,
    Delivery,
    FlourSale,
    GrindingRecord,
    Inventory,
    LedgerState,
    MaizePurchase,
    Supplier,
    Transport,
)
from mill.storage import SNAPSHOT_KEY, SnapshotStorage, dump_state, load_state
from mill.utils import utc_now

logger = logging.getLogger(__name__)


# -------------------------
# Actions
# -------------------------

@dataclass(frozen=True)
class AddSupplier:
    supplier: Supplier


@dataclass(frozen=True)
class AddPurchase:
    purchase: MaizePurchase


@dataclass(frozen=True)
class AddGrinding:
    grinding: GrindingRecord


@dataclass(frozen=True)
class AddCustomer:
    customer: Customer


@dataclass(frozen=True)
class AddSale:
    sale: FlourSale


@dataclass(frozen=True)
class AddTransport:
    transport: Transport


@dataclass(frozen=True)
class UpdateTransport:
    transport_id: str
    updates: dict


@dataclass(frozen=True)
class AddDelivery:
    delivery: Delivery


@dataclass(frozen=True)
class UpdateInventory:
    updates: dict


@dataclass(frozen=True)
class UpdateSettings:
    updates: dict


@dataclass(frozen=True)
class SetAuth:
    value: bool


@dataclass(frozen=True)
class LoadData:
    snapshot: dict


Action = Union[
    AddSupplier,
    AddPurchase,
    AddGrinding,
    AddCustomer,
    AddSale,
    AddTransport,
    UpdateTransport,
    AddDelivery,
    UpdateInventory,
    UpdateSettings,
    SetAuth,
    LoadData,
]


def _merge(obj, updates: dict):
    known = {f.name for f in fields(obj)}
    unknown = set(updates) - known
    if unknown:
        raise ValueError(f"Unknown field(s) for {type(obj).__name__}: {', '.join(sorted(unknown))}")
    return replace(obj, **updates)


def apply(state: LedgerState, action: Action, now: Optional[datetime] = None) -> LedgerState:
    """
    Returns the state that results from applying one action.

    Never mutates `state`. Stock changes are clamped at zero rather than
    rejected; over-draw checks belong to the services that build the actions.
    """
    now = now or utc_now()
    inv = state.inventory

    if isinstance(action, AddSupplier):
        return replace(state, suppliers=[*state.suppliers, action.supplier])

    if isinstance(action, AddPurchase):
        p = action.purchase
        return replace(
            state,
            purchases=[*state.purchases, p],
            inventory=replace(inv, maize_stock_kg=inv.maize_stock_kg + p.amount_kg, last_updated=now),
        )

    if isinstance(action, AddGrinding):
        g = action.grinding
        return replace(
            state,
            grindings=[*state.grindings, g],
            inventory=replace(
                inv,
                maize_stock_kg=max(0.0, inv.maize_stock_kg - g.maize_amount_kg),
                flour_stock_kg=inv.flour_stock_kg + g.flour_yield_kg,
                last_updated=now,
            ),
        )

    if isinstance(action, AddCustomer):
        return replace(state, customers=[*state.customers, action.customer])

    if isinstance(action, AddSale):
        s = action.sale
        return replace(
            state,
            sales=[*state.sales, s],
            inventory=replace(
                inv,
                flour_stock_kg=max(0.0, inv.flour_stock_kg - s.quantity_kg),
                last_updated=now,
            ),
        )

    if isinstance(action, AddTransport):
        return replace(state, transports=[*state.transports, action.transport])

    if isinstance(action, UpdateTransport):
        return replace(
            state,
            transports=[
                _merge(t, action.updates) if t.id == action.transport_id else t
                for t in state.transports
            ],
        )

    if isinstance(action, AddDelivery):
        return replace(state, deliveries=[*state.deliveries, action.delivery])

    if isinstance(action, UpdateInventory):
        return replace(state, inventory=_merge(inv, {**action.updates, "last_updated": now}))

    if isinstance(action, UpdateSettings):
        return replace(state, settings=_merge(state.settings, action.updates))

    if isinstance(action, SetAuth):
        return replace(state, is_authenticated=bool(action.value))

    if isinstance(action, LoadData):
        return _merge(state, action.snapshot)

    raise TypeError(f"Unsupported action: {type(action).__name__}")


def derive_inventory(state: LedgerState) -> tuple[float, float]:
    """
    Replays purchases, grindings and sales by record date and returns
    (maize_kg, flour_kg) with the same zero clamp as apply().

    Records with equal timestamps replay purchases first, then grindings,
    then sales, not in the order they were dispatched; the result can then
    differ from the stored inventory.
    """
    events: list[tuple[Any, int, int, Any]] = []
    for i, p in enumerate(state.purchases):
        events.append((p.purchase_date, 0, i, p))
    for i, g in enumerate(state.grindings):
        events.append((g.grinding_date, 1, i, g))
    for i, s in enumerate(state.sales):
        events.append((s.sale_date, 2, i, s))
    events.sort(key=lambda e: (e[0], e[1], e[2]))

    maize = 0.0
    flour = 0.0
    for _, kind, _, rec in events:
        if kind == 0:
            maize += rec.amount_kg
        elif kind == 1:
            maize = max(0.0, maize - rec.maize_amount_kg)
            flour += rec.flour_yield_kg
        else:
            flour = max(0.0, flour - rec.quantity_kg)
    return maize, flour


def initial_state() -> LedgerState:
    return LedgerState(inventory=Inventory(), settings=AppSettings())


# -------------------------
# Store
# -------------------------

class LedgerStore:
    """
    Holds the current LedgerState and the storage it is persisted to.

    The only way to change the state is dispatch(); every dispatch saves the
    whole snapshot. open() restores the saved snapshot once, close() saves
    a last time and detaches the storage.
    """

    def __init__(self, storage: SnapshotStorage, key: str = SNAPSHOT_KEY):
        self._storage: Optional[SnapshotStorage] = storage
        self._key = key
        self._state = initial_state()
        # Streamlit sessions run on separate threads and share one store.
        self._lock = threading.RLock()

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._storage is not None

    def open(self) -> "LedgerStore":
        with self._lock:
            storage = self._require_storage()
            try:
                saved = storage.get_item(self._key)
                if saved:
                    self._state = apply(self._state, LoadData(load_state(saved)))
                    logger.info("Restored ledger snapshot from %s", storage.path_for(self._key))
            except (ValueError, TypeError, KeyError):
                logger.exception("Error loading saved data; starting from defaults")
        return self

    def dispatch(self, action: Action) -> LedgerState:
        with self._lock:
            storage = self._require_storage()
            self._state = apply(self._state, action)
            logger.debug("Applied %s", type(action).__name__)
            storage.set_item(self._key, dump_state(self._state))
            return self._state

    def reset(self) -> LedgerState:
        """Drops the saved snapshot and returns to the initial state."""
        with self._lock:
            storage = self._require_storage()
            storage.remove_item(self._key)
            self._state = initial_state()
            logger.info("Ledger data cleared")
            return self._state

    def close(self) -> None:
        with self._lock:
            if self._storage is None:
                return
            self._storage.set_item(self._key, dump_state(self._state))
            self._storage = None

    def _require_storage(self) -> SnapshotStorage:
        if self._storage is None:
            raise RuntimeError("Ledger store is closed.")
        return self._storage

    def __enter__(self) -> "LedgerStore":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()
