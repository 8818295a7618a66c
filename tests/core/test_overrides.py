# tests/core/test_overrides.py

import pytest

from alien_rfid.core.exceptions import OverrideStackError
from alien_rfid.core.overrides import OverrideStack


def test_push_pop_is_lifo():
    stack = OverrideStack()
    assert not stack

    assert stack.push({'PersistTime': '5'}) == 1
    assert stack.push({'Mask': ''}) == 2
    assert len(stack) == 2

    assert stack.pop() == {'mask': ''}
    assert stack.pop() == {'persisttime': '5'}
    assert len(stack) == 0


def test_push_copies_snapshot():
    stack = OverrideStack()
    snapshot = {'AcquireMode': 'Inventory'}
    stack.push(snapshot)
    snapshot['AcquireMode'] = 'Global Scroll'

    assert stack.pop() == {'acquiremode': 'Inventory'}


def test_pop_empty_raises():
    with pytest.raises(OverrideStackError):
        OverrideStack().pop()
