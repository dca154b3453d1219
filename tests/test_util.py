import pytest

from tokweave.util import Maybe


def test_ref_and_val_compare_by_value():
    assert Maybe.ref(5) == Maybe.val(5)
    assert not Maybe.ref(5) == Maybe.val(6)


def test_ordering_follows_inner_value():
    items = [Maybe.val(3), Maybe.ref(1), Maybe.val(2)]
    assert [m.value for m in sorted(items)] == [1, 2, 3]
    assert Maybe.val(1) < Maybe.val(2)
    assert Maybe.val(2) >= Maybe.ref(2)


def test_hash_matches_inner_value():
    assert hash(Maybe.ref("abc")) == hash("abc")
    assert len({Maybe.ref("abc"), Maybe.val("abc")}) == 1


def test_repr_is_inner_repr():
    assert repr(Maybe.val("x")) == repr("x")
    assert repr(Maybe.ref([1, 2])) == repr([1, 2])


def test_into_inner_copies_shared_value():
    shared = [1, 2, 3]
    inner = Maybe.ref(shared).into_inner()
    assert inner == shared
    assert inner is not shared


def test_into_inner_returns_owned_value_itself():
    owned = [4, 5]
    assert Maybe.val(owned).into_inner() is owned


def test_into_owned_produces_owned_copy():
    shared = {"k": 1}
    owned = Maybe.ref(shared).into_owned()
    assert owned.is_ref is False
    assert owned == Maybe.val(shared)
    assert owned.value is not shared


def test_shared_value_sees_mutation():
    shared = [1]
    wrapped = Maybe.ref(shared)
    wrapped.value.append(2)
    assert shared == [1, 2]


def test_not_equal_to_plain_value():
    assert (Maybe.val(1) == 1) is False


def test_ordering_against_plain_value_raises():
    with pytest.raises(TypeError):
        Maybe.val(1) < 2