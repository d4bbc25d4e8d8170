"""Shared pytest fixtures."""
from __future__ import annotations

import pytest

from storefront.database.carts import MemoryCartStore
from storefront.models.checkout import CustomerInfo

from tests.fakes import FakeCatalog, FakeOrders


@pytest.fixture()
def catalog() -> FakeCatalog:
    return FakeCatalog(prices={1: 10.0, 2: 4.5, 3: 19.99})


@pytest.fixture()
def orders() -> FakeOrders:
    return FakeOrders()


@pytest.fixture()
def store() -> MemoryCartStore:
    return MemoryCartStore()


@pytest.fixture()
def customer() -> CustomerInfo:
    return CustomerInfo(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone="555-0100",
        address_1="12 Analytical Way",
        city="London",
        state="LDN",
        postcode="N1 9GU",
        country="GB",
    )
