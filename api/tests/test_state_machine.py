from swipe_match.domain import CreateResult, InsertResult
from swipe_match.services.state_machine import is_first_insert, is_first_transition


def test_only_inserted_owns_the_swipe():
    assert is_first_insert(InsertResult.INSERTED) is True
    assert is_first_insert(InsertResult.ALREADY_EXISTS) is False


def test_only_created_owns_side_effects():
    assert is_first_transition(CreateResult.CREATED) is True
    assert is_first_transition(CreateResult.ALREADY_EXISTS) is False
