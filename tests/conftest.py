import pytest

from models import BudgetCategory, Vendor
from storage import JsonFileStorage, MemoryStorage
from store import WeddingStore


@pytest.fixture
def storage(tmp_path):
    return JsonFileStorage(directory=str(tmp_path))


@pytest.fixture
def store(storage):
    return WeddingStore(storage)


@pytest.fixture
def memory_store():
    return WeddingStore(MemoryStorage())


@pytest.fixture
def store_with_vendor(store):
    store.update_budget(50000)
    store.update_budget_categories([
        BudgetCategory(id='cat-photo', name='Photography', allocation=0.4),
        BudgetCategory(id='cat-food', name='Catering', allocation=0.6),
    ])
    vendor = store.add_vendor(Vendor(id='', name='Lens & Light', category='Photography', price=950))
    return store, vendor
