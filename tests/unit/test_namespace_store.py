import threading

import pytest

from nsdb.errors import DuplicateKeyError, NotFoundError
from nsdb.store import KV, NamespaceStore


def test_unknown_namespace_is_not_found():
    s = NamespaceStore()
    with pytest.raises(NotFoundError):
        s.get_bucket('nope')
    with pytest.raises(NotFoundError):
        s.get_entries('nope')


def test_not_found_is_a_key_error():
    s = NamespaceStore()
    with pytest.raises(KeyError):
        s.get_bucket('nope')


def test_set_bucket_then_entries_sorted_by_key():
    s = NamespaceStore()
    s.set_bucket('ns', {'b': '2', 'a': '1'})
    assert s.get_entries('ns') == [KV('a', '1'), KV('b', '2')]
    assert s.get_entries('ns') == [('a', '1'), ('b', '2')]


def test_entries_use_plain_string_ordering():
    s = NamespaceStore()
    s.set_bucket('ns', {'b': '', 'B': '', '10': '', '9': ''})
    assert [kv.key for kv in s.get_entries('ns')] == ['10', '9', 'B', 'b']


def test_set_bucket_merges():
    s = NamespaceStore()
    s.set_bucket('ns', {'a': '1'})
    s.set_bucket('ns', {'a': '2', 'b': '3'})
    assert s.get_bucket('ns') == {'a': '2', 'b': '3'}


def test_set_bucket_with_empty_mapping_creates_nothing():
    s = NamespaceStore()
    s.set_bucket('ns', {})
    with pytest.raises(NotFoundError):
        s.get_bucket('ns')
    assert 'ns' not in s
    assert s.namespaces() == []


def test_set_entries_merges_into_existing_bucket():
    s = NamespaceStore()
    s.set_bucket('ns', {'a': '1', 'c': '3'})
    s.set_entries('ns', [KV('a', 'x'), ('b', '2')])
    assert s.get_bucket('ns') == {'a': 'x', 'b': '2', 'c': '3'}


def test_set_entries_duplicate_key_leaves_store_unchanged():
    s = NamespaceStore()
    s.set_bucket('ns', {'z': '0'})
    with pytest.raises(DuplicateKeyError) as ei:
        s.set_entries('ns', [KV('a', '1'), KV('b', '2'), KV('a', '2')])
    assert ei.value.key == 'a'
    assert s.get_bucket('ns') == {'z': '0'}


def test_set_entries_duplicate_on_new_namespace_creates_nothing():
    s = NamespaceStore()
    with pytest.raises(DuplicateKeyError):
        s.set_entries('ns', [KV('a', '1'), KV('a', '2')])
    with pytest.raises(NotFoundError):
        s.get_bucket('ns')


def test_set_entries_accepts_generator():
    s = NamespaceStore()
    s.set_entries('ns', (KV(str(i), str(i * i)) for i in range(3)))
    assert s.get_bucket('ns') == {'0': '0', '1': '1', '2': '4'}


def test_delete_namespace():
    s = NamespaceStore()
    s.set_bucket('ns', {'a': '1'})
    s.delete_namespace('ns')
    with pytest.raises(NotFoundError):
        s.get_bucket('ns')
    # deleting again is a no-op
    s.delete_namespace('ns')
    s.delete_namespace('never-existed')


def test_get_bucket_returns_a_copy():
    s = NamespaceStore()
    s.set_bucket('ns', {'a': '1'})
    b = s.get_bucket('ns')
    b['a'] = 'changed'
    b['new'] = 'x'
    assert s.get_bucket('ns') == {'a': '1'}
    s.set_bucket('ns', {'b': '2'})
    assert b == {'a': 'changed', 'new': 'x'}


def test_get_entries_is_a_snapshot():
    s = NamespaceStore()
    s.set_bucket('ns', {'a': '1'})
    entries = s.get_entries('ns')
    s.set_bucket('ns', {'b': '2'})
    assert entries == [KV('a', '1')]


def test_empty_bucket_reads_as_missing():
    # a bucket left empty by some other path must still read as NotFound
    s = NamespaceStore({'ns': {}})
    with pytest.raises(NotFoundError):
        s.get_entries('ns')
    assert len(s) == 0


def test_namespaces_contains_and_len():
    s = NamespaceStore()
    s.set_bucket('b', {'k': 'v'})
    s.set_bucket('a', {'k': 'v'})
    assert s.namespaces() == ['a', 'b']
    assert 'a' in s
    assert 'c' not in s
    assert len(s) == 2


def test_read_locked_exposes_live_mapping_and_reset():
    s = NamespaceStore()
    s.set_bucket('ns', {'a': '1'})
    with s.read_locked() as data:
        assert data == {'ns': {'a': '1'}}
    s.reset()
    assert s.namespaces() == []
    s.replace({'x': {'k': 'v'}})
    assert s.get_bucket('x') == {'k': 'v'}


def test_concurrent_writers_on_many_namespaces():
    s = NamespaceStore()

    def work(n):
        for i in range(200):
            s.set_bucket(f'ns{n}', {str(i): str(n)})
            s.get_entries(f'ns{n}')

    threads = [threading.Thread(target=work, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)
    assert len(s) == 8
    for n in range(8):
        assert len(s.get_bucket(f'ns{n}')) == 200


@pytest.mark.parametrize('mapping', [
    {'a': 1},
    {'a': None},
    {1: 'a'},
    {'ok': 'v', 'a': b'bytes'},
])
def test_set_bucket_rejects_non_string_pairs(mapping):
    s = NamespaceStore()
    s.set_bucket('ns', {'z': '0'})
    with pytest.raises(TypeError):
        s.set_bucket('ns', mapping)
    assert s.get_bucket('ns') == {'z': '0'}


def test_set_entries_rejects_non_string_pairs_without_writing():
    s = NamespaceStore()
    with pytest.raises(TypeError):
        s.set_entries('ns', [KV('a', '1'), ('k', None)])
    with pytest.raises(NotFoundError):
        s.get_bucket('ns')


def test_rejects_non_string_namespace():
    s = NamespaceStore()
    with pytest.raises(TypeError):
        s.set_bucket(1, {'a': '1'})  # type: ignore[arg-type]
    assert len(s) == 0
