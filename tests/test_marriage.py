from datetime import date

import pytest

from groupbot.marriage import Couple, MarriageRegistry, RegistryError, Status

GID = 10001
DAY1 = date(2022, 6, 1)
DAY2 = date(2022, 6, 2)


@pytest.fixture
def registry(tmp_path):
    reg = MarriageRegistry(tmp_path / "registry.db")
    yield reg
    reg.close()


def test_check_update_stamps_new_group(registry):
    assert registry.check_update(GID, DAY1) == "2022/06/01"
    assert registry.check_update(GID, DAY2) == "2022/06/01"


def test_reset_moves_update_date(registry):
    registry.check_update(GID, DAY1)
    registry.register(GID, 1, 2, "a", "b", DAY1)
    registry.reset(GID, DAY2)
    assert registry.check_update(GID, DAY1) == DAY2.strftime("%Y/%m/%d")
    assert registry.lookup(GID, 1) == (None, Status.SINGLE)


def test_reset_all_clears_every_group(registry):
    registry.register(1, 5, 6, "a", "b", DAY1)
    registry.register(2, 7, 8, "c", "d", DAY1)
    registry.reset("ALL", DAY2)
    assert registry.roster(1) == []
    assert registry.roster(2) == []
    assert registry.check_update(2, DAY1) == DAY2.strftime("%Y/%m/%d")


def test_register_and_lookup(registry):
    registry.register(GID, 1, 2, "husband", "wife", DAY1)
    couple, status = registry.lookup(GID, 1)
    assert status is Status.HUSBAND
    assert couple == Couple(1, 2, "husband", "wife", "2022/06/01")
    couple, status = registry.lookup(GID, 2)
    assert status is Status.WIFE
    assert couple.user == 1
    assert registry.lookup(GID, 3) == (None, Status.SINGLE)


def test_roster_skips_declared_singles(registry):
    registry.register(GID, 3, 4, "c", "d", DAY1)
    registry.register(GID, 1, 2, "a", "b", DAY1)
    registry.register(GID, 9, 0, "", "", DAY1)
    roster = registry.roster(GID)
    assert [(c.user, c.target) for c in roster] == [(1, 2), (3, 4)]


def test_declared_single_has_zero_target(registry):
    registry.register(GID, 9, 0, "", "", DAY1)
    couple, status = registry.lookup(GID, 9)
    assert status is Status.HUSBAND
    assert couple.target == 0


def test_divorce_wife(registry):
    registry.register(GID, 1, 2, "a", "b", DAY1)
    registry.divorce_wife(GID, 2)
    assert registry.lookup(GID, 1)[1] is Status.SINGLE
    assert registry.lookup(GID, 2)[1] is Status.SINGLE


def test_divorce_husband(registry):
    registry.register(GID, 1, 2, "a", "b", DAY1)
    registry.divorce_husband(GID, 1)
    assert registry.roster(GID) == []


def test_divorce_on_unknown_group_raises(registry):
    with pytest.raises(RegistryError):
        registry.divorce_wife(424242, 1)


def test_remarry_replaces_husband_record(registry):
    registry.register(GID, 1, 2, "a", "b", DAY1)
    registry.remarry(GID, 1, 3, "a", "c", DAY1)
    couple, status = registry.lookup(GID, 1)
    assert status is Status.HUSBAND
    assert couple.target == 3
    assert registry.lookup(GID, 2)[1] is Status.SINGLE


def test_remarry_skips_when_both_are_husbands(registry):
    registry.register(GID, 1, 2, "a", "b", DAY1)
    registry.register(GID, 3, 4, "c", "d", DAY1)
    registry.remarry(GID, 1, 3, "a", "c", DAY1)
    assert registry.lookup(GID, 1)[0].target == 2
    assert registry.lookup(GID, 3)[0].target == 4