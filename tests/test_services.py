from __future__ import annotations

import pytest

from mill.ledger import UpdateInventory, derive_inventory
from mill.services.auth import demo_login, login, logout
from mill.services.demo_data import load_demo_data
from mill.services.grinding import available_purchases, record_grinding, remaining_for_purchase
from mill.services.purchases import add_supplier, purchase_counts_by_supplier, record_purchase
from mill.services.sales import add_customer, build_receipt, customer_totals, record_sale
from mill.services.settings import clear_all_data, reset_settings, save_settings


@pytest.fixture
def stocked(store, now):
    supplier = add_supplier(store, name="Kamau Farm", contact="0712 345 678", location="Nakuru", now=now)
    purchase = record_purchase(store, supplier_id=supplier.id, amount_kg=100, price_per_kg=40, now=now)
    customer = add_customer(store, name="Baraka Bakery", contact="0756", now=now)
    return store, supplier, purchase, customer


class TestPurchases:
    def test_supplier_requires_name_and_contact(self, store):
        with pytest.raises(ValueError, match="Name and contact are required"):
            add_supplier(store, name="  ", contact="0712")
        assert store.state.suppliers == []

    def test_purchase_records_total_and_stock(self, stocked):
        store, supplier, purchase, _ = stocked
        assert purchase.total_cost == 4000
        assert purchase.supplier_name == "Kamau Farm"
        assert store.state.inventory.maize_stock_kg == 100
        assert purchase_counts_by_supplier(store.state) == {supplier.id: 1}

    def test_purchase_unknown_supplier(self, store):
        with pytest.raises(ValueError, match="Supplier not found"):
            record_purchase(store, supplier_id="nope", amount_kg=10, price_per_kg=5)

    def test_purchase_rejects_non_positive_amount(self, stocked):
        store, supplier, _, _ = stocked
        with pytest.raises(ValueError, match="must be > 0"):
            record_purchase(store, supplier_id=supplier.id, amount_kg=0, price_per_kg=5)
        assert len(store.state.purchases) == 1


class TestGrinding:
    def test_records_and_moves_stock(self, stocked):
        store, _, purchase, _ = stocked
        g = record_grinding(store, purchase_id=purchase.id, maize_amount_kg=60, flour_yield_kg=45, grinding_cost=120)

        assert g.yield_percentage == pytest.approx(75.0)
        assert store.state.inventory.maize_stock_kg == 40
        assert store.state.inventory.flour_stock_kg == 45
        assert remaining_for_purchase(store.state, purchase.id) == 40

    def test_cannot_exceed_purchase_remainder(self, stocked):
        store, _, purchase, _ = stocked
        record_grinding(store, purchase_id=purchase.id, maize_amount_kg=70, flour_yield_kg=50)
        with pytest.raises(ValueError, match="Only 30kg available from this purchase"):
            record_grinding(store, purchase_id=purchase.id, maize_amount_kg=31, flour_yield_kg=20)
        assert len(store.state.grindings) == 1

    def test_cannot_exceed_maize_stock(self, stocked):
        store, supplier, purchase, _ = stocked
        store.dispatch(UpdateInventory({"maize_stock_kg": 20}))
        with pytest.raises(ValueError, match="Not enough maize in stock"):
            record_grinding(store, purchase_id=purchase.id, maize_amount_kg=50, flour_yield_kg=40)

    def test_required_fields(self, stocked):
        store, _, purchase, _ = stocked
        with pytest.raises(ValueError, match="required"):
            record_grinding(store, purchase_id=purchase.id, maize_amount_kg=10, flour_yield_kg=None)

    def test_fully_ground_purchase_not_available(self, stocked):
        store, _, purchase, _ = stocked
        assert [p.id for p, _ in available_purchases(store.state)] == [purchase.id]
        record_grinding(store, purchase_id=purchase.id, maize_amount_kg=100, flour_yield_kg=80)
        assert available_purchases(store.state) == []


class TestSales:
    def test_sale_cannot_exceed_flour_stock(self, stocked):
        store, _, purchase, customer = stocked
        record_grinding(store, purchase_id=purchase.id, maize_amount_kg=50, flour_yield_kg=40)

        with pytest.raises(ValueError, match="Only 40kg flour available in stock"):
            record_sale(store, customer_id=customer.id, quantity_kg=41, price_per_kg=100)
        assert store.state.sales == []

    def test_sale_records_total_and_stock(self, stocked):
        store, _, purchase, customer = stocked
        record_grinding(store, purchase_id=purchase.id, maize_amount_kg=50, flour_yield_kg=40)
        sale = record_sale(
            store, customer_id=customer.id, quantity_kg=25, price_per_kg=120, payment_method="mobile_money"
        )

        assert sale.total_amount == 3000
        assert sale.customer_name == "Baraka Bakery"
        assert store.state.inventory.flour_stock_kg == 15
        totals = customer_totals(store.state)
        assert totals[0].total_amount == 3000
        assert totals[0].sales_count == 1

    def test_invalid_payment_method(self, stocked):
        store, _, purchase, customer = stocked
        record_grinding(store, purchase_id=purchase.id, maize_amount_kg=50, flour_yield_kg=40)
        with pytest.raises(ValueError, match="Invalid payment method"):
            record_sale(store, customer_id=customer.id, quantity_kg=5, price_per_kg=100, payment_method="barter")

    def test_unknown_customer(self, store):
        with pytest.raises(ValueError, match="Customer not found"):
            record_sale(store, customer_id="ghost", quantity_kg=1, price_per_kg=1)

    def test_receipt(self, stocked, now):
        store, _, purchase, customer = stocked
        record_grinding(store, purchase_id=purchase.id, maize_amount_kg=50, flour_yield_kg=40)
        sale = record_sale(store, customer_id=customer.id, quantity_kg=10, price_per_kg=110, now=now)

        text = build_receipt(sale, store.state.settings)
        assert text.splitlines()[0] == "FarmFlour Mill"
        assert "Customer: Baraka Bakery" in text
        assert "Total: KES 1100.00" in text
        assert f"Receipt ID: #{sale.id[-6:]}" in text


class TestAuthAndSettings:
    def test_login_requires_credentials(self, store):
        with pytest.raises(ValueError, match="both email and password"):
            login(store, email="a@b.c", password="")
        assert store.state.is_authenticated is False

    def test_login_logout(self, store):
        assert login(store, email=" Owner@Mill.co.ke ", password="x") == "owner@mill.co.ke"
        assert store.state.is_authenticated
        logout(store)
        assert not store.state.is_authenticated
        assert demo_login(store) == "demo"

    def test_save_and_reset_settings(self, store):
        s = save_settings(store, business_name="Upendo Mill", low_stock_threshold="75")
        assert s.business_name == "Upendo Mill"
        assert s.low_stock_threshold == 75.0

        with pytest.raises(ValueError):
            save_settings(store, default_flour_price=-1)
        with pytest.raises(ValueError, match="Unknown setting"):
            save_settings(store, currency="USD")

        assert reset_settings(store).business_name == "FarmFlour Mill"

    def test_clear_all_data(self, stocked):
        store = stocked[0]
        clear_all_data(store)
        assert store.state.suppliers == []
        assert store.state.inventory.maize_stock_kg == 0


def test_demo_data_keeps_stock_consistent(store):
    load_demo_data(store)
    state = store.state
    assert len(state.suppliers) == 3
    assert len(state.purchases) == 6
    assert len(state.grindings) == 6
    assert state.inventory.maize_stock_kg >= 0
    assert derive_inventory(state) == pytest.approx(
        (state.inventory.maize_stock_kg, state.inventory.flour_stock_kg)
    )
