import json
import os

import pytest

from config import INITIAL_GUEST_GROUPS
from errors import NotFound, PersistenceFailure, ValidationError
from models import BudgetCategory, GiftItem, Guest, Task, Transaction, UserProfile, Vendor, WeddingDetails
from storage import JsonFileStorage
from store import WeddingStore


def _vendor_transactions(store, vendor_id):
    return [t for t in store.data.transactions if t.vendor_id == vendor_id]


def test_new_store_persists_defaults(storage):
    store = WeddingStore(storage)

    assert store.data.wedding_date is None
    assert store.data.guest_groups == INITIAL_GUEST_GROUPS
    with open(storage.path, encoding='utf-8') as f:
        saved = json.load(f)
    assert saved['guestGroups'] == INITIAL_GUEST_GROUPS
    assert saved['budget'] == {'total': 0.0, 'categories': []}


def test_load_backfills_missing_fields(storage):
    storage.write({'weddingDate': '2026-05-20', 'guests': [{'id': 'g1', 'name': 'Ana', 'group': 'Family'}]})

    store = WeddingStore(storage)

    assert store.data.wedding_date == '2026-05-20'
    assert store.data.guests[0].name == 'Ana'
    assert store.data.guest_groups == INITIAL_GUEST_GROUPS
    assert 'vendors' in storage.read()


def test_mutations_survive_reload(store, storage):
    store.set_wedding_date('2026-09-12')
    guest = store.add_guest(Guest(id='', name='Ana', group="Bride's Family"))

    reopened = WeddingStore(storage)

    assert reopened.data.wedding_date == '2026-09-12'
    assert reopened.data.guests[0].id == guest.id
    assert guest.id


def test_subscribers_receive_new_document(store):
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.update_budget(30000)
    unsubscribe()
    store.update_budget(40000)

    assert len(seen) == 1
    assert seen[0].budget.total == 30000
    assert store.data.budget.total == 40000


def test_budget_categories_are_normalized(store):
    store.update_budget_categories([
        BudgetCategory(id='a', name='Venue', allocation=2),
        BudgetCategory(id='b', name='Music', allocation=2),
    ])
    assert [c.allocation for c in store.data.budget.categories] == [0.5, 0.5]


def test_category_rename_carries_over_to_vendors(store_with_vendor):
    store, vendor = store_with_vendor
    cats = store.snapshot().budget.categories
    cats[0].name = 'Photo & Video'

    store.update_budget_categories(cats)

    assert store.data.vendors[0].category == 'Photo & Video'
    assert store.get_category_by_name('Photo & Video').id == 'cat-photo'


def test_not_found_leaves_document_unchanged(store):
    before = store.snapshot()
    with pytest.raises(NotFound):
        store.update_guest(Guest(id='missing', name='X', group='Y'))
    with pytest.raises(NotFound):
        store.delete_task('missing')
    with pytest.raises(NotFound):
        store.update_vendor_payment_status('missing', 'p', True)
    assert store.data == before


def test_persistence_failure_leaves_document_unchanged(store, storage, monkeypatch):
    def broken_write(payload):
        raise PersistenceFailure('disk full')

    monkeypatch.setattr(storage, 'write', broken_write)
    seen = []
    store.subscribe(seen.append)

    with pytest.raises(PersistenceFailure):
        store.add_task(Task(id='', title='Book venue'))

    assert store.data.tasks == []
    assert seen == []


def test_unserializable_value_is_persistence_failure(store):
    with pytest.raises(PersistenceFailure):
        store.update_budget(float('nan'))
    assert store.data.budget.total == 0


def test_write_error_is_persistence_failure(tmp_path, monkeypatch):
    storage = JsonFileStorage(directory=str(tmp_path))
    store = WeddingStore(storage)

    def fail_replace(src, dst):
        raise OSError('read-only file system')

    monkeypatch.setattr('storage.os.replace', fail_replace)
    with pytest.raises(PersistenceFailure):
        store.set_wedding_date('2026-01-01')
    assert store.data.wedding_date is None


def test_contract_vendor_installments(store_with_vendor):
    store, vendor = store_with_vendor

    store.contract_vendor(vendor.id, 900, 'installment', installments=3, first_due_date='2025-01-01')

    v = store.data.vendors[0]
    assert v.is_contracted
    assert v.total_contract_amount == 900
    assert v.paid_amount == 0
    assert [p.due_date for p in v.payments] == ['2025-01-01', '2025-02-01', '2025-03-01']
    txs = _vendor_transactions(store, vendor.id)
    assert [t.amount for t in txs] == [-300, -300, -300]
    assert all(t.category_id == 'cat-photo' for t in txs)
    assert [t.payment_id for t in txs] == [p.id for p in v.payments]


def test_payment_status_keeps_paid_amount_and_transaction_in_sync(store_with_vendor):
    store, vendor = store_with_vendor
    store.contract_vendor(vendor.id, 900, 'installment', installments=3, first_due_date='2025-01-01')
    second = store.data.vendors[0].payments[1]

    store.update_vendor_payment_status(vendor.id, second.id, True)

    assert store.data.vendors[0].paid_amount == second.amount
    paid = [t for t in store.data.transactions if t.is_paid]
    assert len(paid) == 1
    assert paid[0].date == second.due_date
    assert abs(paid[0].amount) == second.amount

    store.update_vendor_payment_status(vendor.id, second.id, False)
    assert store.data.vendors[0].paid_amount == 0
    assert not any(t.is_paid for t in store.data.transactions)


def test_payment_status_matches_legacy_transactions(store_with_vendor):
    store, vendor = store_with_vendor
    store.contract_vendor(vendor.id, 600, 'installment', installments=2, first_due_date='2025-05-10')
    legacy = store.snapshot()
    for t in legacy.transactions:
        t.payment_id = None
        store.update_transaction(t)
    first = store.data.vendors[0].payments[0]

    store.update_vendor_payment_status(vendor.id, first.id, True)

    paid = [t for t in store.data.transactions if t.is_paid]
    assert [t.date for t in paid] == ['2025-05-10']


def test_single_payment_defaults_to_wedding_date(store_with_vendor):
    store, vendor = store_with_vendor
    store.set_wedding_date('2026-10-10')

    store.contract_vendor(vendor.id, 1200, 'single')

    payments = store.data.vendors[0].payments
    assert len(payments) == 1
    assert payments[0].amount == 1200
    assert payments[0].due_date == '2026-10-10'
    assert payments[0].description == 'Single payment — Lens & Light'


def test_recontract_regenerates_schedule(store_with_vendor):
    store, vendor = store_with_vendor
    store.contract_vendor(vendor.id, 900, 'installment', installments=3, first_due_date='2025-01-01')
    store.update_vendor_payment_status(vendor.id, store.data.vendors[0].payments[0].id, True)

    store.contract_vendor(vendor.id, 1000, 'installment', installments=2, first_due_date='2025-02-01')

    v = store.data.vendors[0]
    assert [p.amount for p in v.payments] == [500, 500]
    assert v.paid_amount == 0
    txs = _vendor_transactions(store, vendor.id)
    assert len(txs) == 2
    assert not any(t.is_paid for t in txs)


def test_contract_rejects_invalid_terms(store_with_vendor):
    store, vendor = store_with_vendor
    with pytest.raises(ValidationError):
        store.contract_vendor(vendor.id, 0, 'single')
    with pytest.raises(ValidationError):
        store.contract_vendor(vendor.id, 500, 'installment', installments=3)
    assert not store.data.vendors[0].is_contracted


def test_uncontract_keeps_schedule_and_paid_transactions(store_with_vendor):
    store, vendor = store_with_vendor
    store.contract_vendor(vendor.id, 900, 'installment', installments=3, first_due_date='2025-01-01')
    store.update_vendor_payment_status(vendor.id, store.data.vendors[0].payments[0].id, True)

    store.uncontract_vendor(vendor.id)

    v = store.data.vendors[0]
    assert not v.is_contracted
    assert len(v.payments) == 3
    txs = _vendor_transactions(store, vendor.id)
    assert len(txs) == 1
    assert txs[0].is_paid


def test_update_vendor_recomputes_paid_amount_and_uncontracts(store_with_vendor):
    store, vendor = store_with_vendor
    store.contract_vendor(vendor.id, 900, 'installment', installments=3, first_due_date='2025-01-01')
    edited = store.snapshot().vendors[0]
    edited.paid_amount = 12345
    edited.is_contracted = False

    store.update_vendor(edited)

    assert store.data.vendors[0].paid_amount == 0
    assert _vendor_transactions(store, vendor.id) == []


def test_delete_vendor_cascades_transactions(store_with_vendor):
    store, vendor = store_with_vendor
    store.contract_vendor(vendor.id, 900, 'installment', installments=3, first_due_date='2025-01-01')
    store.add_transaction(Transaction(id='', date='2025-01-05', amount=-50, description='Flowers', category_id='cat-food'))

    store.delete_vendor(vendor.id)

    assert store.data.vendors == []
    assert [t.description for t in store.data.transactions] == ['Flowers']


def test_transaction_crud(store):
    tx = store.add_transaction(Transaction(id='', date='2025-01-05', amount=-80, description='Invitations', category_id='x'))
    tx.is_paid = True
    store.update_transaction(tx)
    assert store.data.transactions[0].is_paid

    store.delete_transaction(tx.id)
    assert store.data.transactions == []


def test_guest_group_deletion_does_not_cascade(store):
    store.add_guest(Guest(id='', name='Leo', group='Colleagues'))

    store.update_guest_groups([g for g in store.data.guest_groups if g != 'Colleagues'])

    assert 'Colleagues' not in store.data.guest_groups
    assert store.data.guests[0].group == 'Colleagues'


def test_gift_crud(store):
    gift = store.add_gift(GiftItem(id='', name='Blender', room='Kitchen', price=300.0))
    gift.is_received = True
    store.update_gift(gift)
    assert store.data.gifts[0].is_received
    store.delete_gift(gift.id)
    assert store.data.gifts == []


def test_save_initial_setup(store):
    store.save_initial_setup(
        user_profile=UserProfile(bride_name='Ana', groom_name='Leo', user_full_name='Ana Souza', user_email='ana@example.com'),
        wedding_date='2026-11-21',
        wedding_details=WeddingDetails(ceremony_time='16:00', guest_estimate=120),
        budget_total=80000,
        selected_packages=['aluguel_espaco', 'buffet', 'outros'],
        other_package_name='Honeymoon',
    )

    d = store.data
    assert d.wedding_date == '2026-11-21'
    assert d.budget.total == 80000
    assert [c.name for c in d.budget.categories] == ['Venue Rental', 'Catering (Food and Drinks)', 'Honeymoon']
    assert sum(c.allocation for c in d.budget.categories) == pytest.approx(1.0)
    assert d.selected_packages == ['aluguel_espaco', 'buffet', 'outros']
    assert d.user_profile.bride_name == 'Ana'
    assert d.wedding_details.guest_estimate == 120


def test_profile_and_details_updates(store):
    store.update_user_profile(UserProfile(user_instagram='@anaeleo'))
    store.update_wedding_details(WeddingDetails(reception_location='Beach Club'))
    assert store.data.user_profile.user_instagram == '@anaeleo'
    assert store.data.wedding_details.reception_location == 'Beach Club'


def test_reset_app_restores_defaults(store_with_vendor, storage):
    store, vendor = store_with_vendor
    store.set_wedding_date('2026-03-03')
    store.contract_vendor(vendor.id, 900, 'installment', installments=3, first_due_date='2025-01-01')
    store.add_guest(Guest(id='', name='Ana', group='Family'))
    store.add_task(Task(id='', title='Book DJ'))
    store.add_gift(GiftItem(id='', name='Mixer'))
    store.update_guest_groups(['Only one'])

    store.reset_app()

    d = store.data
    assert d.transactions == [] and d.vendors == [] and d.guests == []
    assert d.tasks == [] and d.gifts == []
    assert d.wedding_date is None
    assert d.guest_groups == INITIAL_GUEST_GROUPS
    assert WeddingStore(storage).data == d


def test_task_crud_in_memory(memory_store):
    task = memory_store.add_task(Task(id='', title='Send invitations', priority='high'))
    assert task.id

    task.status = 'done'
    memory_store.update_task(task)
    assert memory_store.data.tasks[0].status == 'done'

    memory_store.delete_task(task.id)
    assert memory_store.data.tasks == []


def test_swapping_category_names_keeps_vendors_apart(store):
    store.update_budget_categories([
        BudgetCategory(id='a', name='Photo', allocation=0.5),
        BudgetCategory(id='b', name='Video', allocation=0.5),
    ])
    store.add_vendor(Vendor(id='', name='P', category='Photo'))
    store.add_vendor(Vendor(id='', name='V', category='Video'))

    store.update_budget_categories([
        BudgetCategory(id='a', name='Video', allocation=0.5),
        BudgetCategory(id='b', name='Photo', allocation=0.5),
    ])

    assert [(v.name, v.category) for v in store.data.vendors] == [('P', 'Video'), ('V', 'Photo')]


def test_unreadable_document_is_kept_aside(tmp_path):
    storage = JsonFileStorage(directory=str(tmp_path))
    broken = '{"weddingDate": "2026-01-01", "guests": [ '
    with open(storage.path, 'w', encoding='utf-8') as f:
        f.write(broken)

    store = WeddingStore(storage)

    assert store.data.wedding_date is None
    backups = [name for name in os.listdir(tmp_path) if name.endswith('.corrupt')]
    assert len(backups) == 1
    with open(os.path.join(str(tmp_path), backups[0]), encoding='utf-8') as f:
        assert f.read() == broken
