import gc
import random
import threading

import pytest

import weakid
from weakid import IdRegistry
from weakid.exceptions import IdCollisionWarning, IdConflictError, IdExhaustedError


# a blank class for testing
class Foo:
    pass


class Value:
    def __init__(self, value):
        self.value = value

    def __eq__(self, other):
        return isinstance(other, Value) and self.value == other.value

    def __hash__(self):
        return hash(self.value)


@pytest.fixture()
def registry():
    return IdRegistry()


def test_scenario(registry):
    x = Foo()
    y = Foo()
    z = Foo()
    assert registry.get_id(x) == 1
    assert registry.get_id(y) == 2
    assert registry.get_id(x) == 1
    assert registry.check_id(Foo()) == 0
    registry.set_id(z, 100)
    assert registry.get_id(z) == 100
    fresh = Foo()
    assert registry.get_id(fresh) == 3


def test_identity_not_equality(registry):
    a = Value(1)
    b = Value(1)
    assert a == b
    assert registry.get_id(a) != registry.get_id(b)


def test_get_id_idempotent(registry):
    f = Foo()
    assert registry.check_id(f) == 0
    first = registry.get_id(f)
    assert all(registry.get_id(f) == first for _ in range(10))
    assert registry.check_id(f) == first


def test_check_id_does_not_allocate(registry):
    f = Foo()
    assert registry.check_id(f) == 0
    assert registry.next_id() == 1
    assert len(registry) == 0


def test_monotonic(registry):
    objs = [Foo() for _ in range(20)]
    ids = [registry.get_id(o) for o in objs]
    assert ids == list(range(1, 21))
    assert registry.next_id() == 21


def test_unique(registry):
    objs = [Foo() for _ in range(50)]
    ids = {registry.get_id(o) for o in objs}
    assert len(ids) == 50
    assert 0 not in ids


def test_get_object(registry):
    f = Foo()
    obj_id = registry.get_id(f)
    assert registry.get_object(obj_id) is f


def test_get_object_unknown(registry):
    assert registry.get_object(0) is None
    assert registry.get_object(1) is None
    assert registry.get_object(12345) is None


def test_next_id(registry):
    assert registry.next_id() == 1
    f = Foo()
    registry.get_id(f)
    assert registry.next_id() == 2
    registry.get_id(f)
    assert registry.next_id() == 2


def test_reclamation(registry):
    f = Foo()
    obj_id = registry.get_id(f)
    assert len(registry) == 1
    del f
    gc.collect(2)
    assert registry.get_object(obj_id) is None
    assert len(registry) == 0


def test_ids_not_reused(registry):
    issued = []
    for _ in range(10):
        f = Foo()
        issued.append(registry.get_id(f))
        del f
        gc.collect(2)
    assert issued == list(range(1, 11))
    assert len(registry) == 0


def test_reclaim_cycle(registry):
    f = Foo()
    f.me = f
    obj_id = registry.get_id(f)
    del f
    gc.collect(2)
    assert registry.get_object(obj_id) is None


def test_flush(registry):
    objs = [Foo() for _ in range(10)]
    for o in objs:
        registry.get_id(o)
    del o
    objs.clear()
    gc.collect(2)
    registry.flush()
    registry.flush()
    assert len(registry) == 0
    assert registry.next_id() == 11


def test_set_id(registry):
    f = Foo()
    registry.set_id(f, 5)
    assert registry.check_id(f) == 5
    assert registry.get_id(f) == 5
    assert registry.get_object(5) is f


def test_set_id_noop(registry):
    f = Foo()
    registry.set_id(f, 5)
    registry.set_id(f, 5)
    assert len(registry) == 1
    assert registry.get_object(5) is f


def test_set_id_conflict(registry):
    a = Foo()
    b = Foo()
    registry.set_id(a, 5)
    with pytest.raises(IdConflictError, match="already assigned to another object"):
        registry.set_id(b, 5)
    assert registry.get_object(5) is a
    assert registry.check_id(b) == 0


def test_set_id_object_already_registered(registry):
    a = Foo()
    assert registry.get_id(a) == 1
    with pytest.raises(IdConflictError, match="already assigned id 1"):
        registry.set_id(a, 7)
    assert registry.get_object(7) is None
    assert registry.check_id(a) == 1


def test_set_id_after_reclamation(registry):
    a = Foo()
    registry.set_id(a, 5)
    del a
    gc.collect(2)
    b = Foo()
    registry.set_id(b, 5)
    assert registry.get_object(5) is b


def test_set_id_does_not_advance_counter(registry):
    a = Foo()
    registry.set_id(a, 50)
    assert registry.next_id() == 1


def test_get_id_skips_set_ids(registry):
    a = Foo()
    b = Foo()
    c = Foo()
    registry.set_id(a, 2)
    assert registry.get_id(b) == 1
    with pytest.warns(IdCollisionWarning, match="id 2"):
        assert registry.get_id(c) == 3
    assert registry.get_object(2) is a
    assert registry.next_id() == 4


def test_get_id_skip_without_warning():
    with weakid.config_context() as config:
        config.warn_on_id_skip = False
        registry = IdRegistry()
    a = Foo()
    b = Foo()
    registry.set_id(a, 1)
    assert registry.get_id(b) == 2


@pytest.mark.parametrize("bad_id", [0, -1])
def test_set_id_out_of_range(registry, bad_id):
    with pytest.raises(ValueError, match="out of range"):
        registry.set_id(Foo(), bad_id)


@pytest.mark.parametrize("bad_id", [True, 1.0, "1", None])
def test_set_id_not_int(registry, bad_id):
    with pytest.raises(TypeError, match="must be an int"):
        registry.set_id(Foo(), bad_id)


@pytest.mark.parametrize("bad_id", [True, 1.0, "1"])
def test_get_object_not_int(registry, bad_id):
    registry.get_id(Foo())
    with pytest.raises(TypeError, match="must be an int"):
        registry.get_object(bad_id)


def test_get_object_none(registry):
    registry.get_id(Foo())
    with pytest.raises(ValueError, match="None"):
        registry.get_object(None)


def test_set_id_above_max():
    registry = IdRegistry(max_id=10)
    with pytest.raises(ValueError, match="out of range"):
        registry.set_id(Foo(), 11)


def test_none(registry):
    with pytest.raises(ValueError, match="None"):
        registry.get_id(None)
    with pytest.raises(ValueError, match="None"):
        registry.check_id(None)
    with pytest.raises(ValueError, match="None"):
        registry.set_id(None, 1)
    assert None not in registry


def test_not_weakly_referenceable(registry):
    with pytest.raises(TypeError):
        registry.get_id(42)
    assert registry.next_id() == 1
    assert len(registry) == 0


def test_exhaustion():
    registry = IdRegistry(max_id=2)
    a = Foo()
    b = Foo()
    c = Foo()
    assert registry.get_id(a) == 1
    assert registry.get_id(b) == 2
    with pytest.raises(IdExhaustedError):
        registry.get_id(c)
    with pytest.raises(IdExhaustedError):
        registry.get_id(c)
    # existing bindings still work
    assert registry.get_id(a) == 1
    assert registry.get_object(2) is b
    assert registry.check_id(c) == 0


def test_exhaustion_after_reclamation():
    registry = IdRegistry(max_id=1)
    a = Foo()
    registry.get_id(a)
    del a
    gc.collect(2)
    with pytest.raises(IdExhaustedError):
        registry.get_id(Foo())


def test_max_id_from_config():
    with weakid.config_context() as config:
        config.max_id = 1
        registry = IdRegistry()
    assert registry.max_id == 1
    a = Foo()
    registry.get_id(a)
    with pytest.raises(IdExhaustedError):
        registry.get_id(Foo())


def test_default_max_id(registry):
    assert registry.max_id == 2**64 - 1


@pytest.mark.parametrize("max_id", [0, -5, True, "10"])
def test_invalid_max_id(max_id):
    with pytest.raises(ValueError, match="max_id"):
        IdRegistry(max_id=max_id)


def test_contains(registry):
    a = Foo()
    b = Foo()
    registry.get_id(a)
    assert a in registry
    assert b not in registry


def test_repr(registry):
    a = Foo()
    registry.get_id(a)
    assert repr(registry) == "<IdRegistry entries=1 next=2>"


def test_threaded_same_objects(registry):
    objs = [Foo() for _ in range(500)]
    results = [{} for _ in range(8)]

    def worker(n):
        order = list(objs)
        random.Random(n).shuffle(order)
        for o in order:
            results[n][id(o)] = registry.get_id(o)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for result in results[1:]:
        assert result == results[0]
    assert sorted(results[0].values()) == list(range(1, 501))
    for o in objs:
        assert registry.get_object(registry.check_id(o)) is o


def test_threaded_with_collection(registry):
    issued = [[] for _ in range(8)]
    errors = []

    def worker(n):
        for _ in range(300):
            f = Foo()
            obj_id = registry.get_id(f)
            if registry.get_object(obj_id) is not f:
                errors.append(obj_id)
            issued[n].append(obj_id)
            del f

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    gc.collect(2)
    assert not errors
    all_ids = [i for ids in issued for i in ids]
    assert len(set(all_ids)) == len(all_ids) == 2400
    assert len(registry) == 0
