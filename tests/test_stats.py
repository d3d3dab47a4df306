"""Bounded stat rules on players and monsters."""

import pytest

from tests.factories import make_player, monster_snapshot
from wayfarer.game.monster import Monster
from wayfarer.game.stats import round_half_up, to_int, vary


@pytest.mark.parametrize("delta", [-1000, -51, -50, -7, -1, 1, 7, 49, 50, 1000])
def test_bounded_hp_always_within_range(delta):
    player = make_player(hp=20, max_hp=50)
    assert player.augment("hp", delta)
    assert 0 <= player.hp <= player.max_hp
    assert player.hp == max(0, min(20 + delta, 50))
    # Pushing past the bound again leaves it clamped
    player.augment("hp", delta)
    assert 0 <= player.hp <= player.max_hp


def test_mp_clamped_and_damage_marks_player():
    player = make_player(mp=10, max_mp=25)
    assert player.augment("mp", 500)
    assert player.mp == 25
    assert not player.flags.damaged
    player.augment("mp", -3)
    assert player.mp == 22
    assert player.flags.damaged


def test_floor_stats_fall_back_to_minimum():
    player = make_player(attack=4, gold=10, str=3)
    player.augment("attack", -10)
    player.augment("gold", -11)
    player.augment("str", -5)
    assert player.attack == 0
    assert player.gold == 0
    assert player.stat("str") == 1
    player.augment("gold", 1_000_000)
    assert player.gold == 1_000_000


def test_augment_rejects_unknown_zero_and_non_numeric():
    player = make_player()
    assert not player.augment("charisma", 5)
    assert not player.augment("id", 5)
    assert not player.augment("hp", 0)
    assert not player.augment("gold", "lots")
    assert not player.augment("gold", None)
    assert not player.flags.stats


def test_numeric_string_delta_is_accepted():
    player = make_player(gold=5)
    assert player.augment("gold", "10")
    assert player.gold == 15
    assert player.flags.stats


def test_lowering_max_hp_drags_hp_down():
    player = make_player(hp=60, max_hp=60)
    player.augment("max_hp", -5)
    assert player.max_hp == 55
    assert player.hp == 55
    # max_hp has its own floor
    player.augment("max_hp", -100)
    assert player.max_hp == 50
    assert player.hp == 50


def test_player_loads_with_floors_applied():
    player = make_player(hp=999, max_hp=10, max_mp=1, attack=-4, gold="abc")
    assert player.max_hp == 50
    assert player.hp == 50
    assert player.max_mp == 25
    assert player.attack == 0
    assert player.gold == 100  # starting gold when unset or unusable


def test_monster_defeat_handled_once():
    monster = Monster.from_snapshot(monster_snapshot(hp=5, reward_exp=7, reward_gold=3))
    rewards = monster.take_damage(9)
    assert monster.hp == 0
    assert rewards == {"xp": 7, "gold": 3}
    assert monster.results == {"monsterDefeated": [["Rat", 7, 3]]}
    # Further damage never re-emits rewards
    assert monster.take_damage(4) == {}
    monster.augment("hp", -3)
    assert monster.results == {"monsterDefeated": [["Rat", 7, 3]]}


def test_helpers():
    assert to_int("12") == 12
    assert to_int(" 7.9 ") == 7
    assert to_int(True) is None
    assert to_int("x", 0) == 0
    assert round_half_up(2.5) == 3
    assert round_half_up(0.25) == 0
    assert round_half_up(1.75) == 2

    class Recorder:
        def randint(self, a, b):
            self.bounds = (a, b)
            return a

    rec = Recorder()
    vary(10, 10, rec)
    assert rec.bounds == (9, 11)
    vary(3, 200, rec)
    assert rec.bounds == (0, 9)
