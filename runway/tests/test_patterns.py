# runway/tests/test_patterns.py
from __future__ import annotations
import json

import pytest

from runway.game.diagnostics import DiagnosticEvent, Diagnostics, EventRecorder
from runway.game.errors import InvalidPatternError
from runway.game.level_config import default_level_table
from runway.game.models import ObstacleDefinition, ObstaclePattern, ObstacleType
from runway.game.pattern_catalog import BUILTIN_PATTERNS
from runway.game.patterns import (
    default_library, load_patterns, pattern_from_dict, patterns_from_json, validate_pattern,
)

J, A, P, Y = ObstacleType.JUMP, ObstacleType.AVOID, ObstacleType.PALISADE, ObstacleType.PYLON


def make_pattern(name="P", obstacles=((J, 0, 0.0),), difficulty=3, levels=(1, 9), length=20.0):
    return ObstaclePattern(
        name=name, difficulty=difficulty, min_level=levels[0], max_level=levels[1],
        length=length,
        obstacles=tuple(ObstacleDefinition(t, lane, z) for t, lane, z in obstacles),
    )


def test_all_lethal_row_rejected_and_never_selected():
    diagnostics = Diagnostics()
    recorder = EventRecorder(diagnostics)
    wall = make_pattern("Wall", [(A, -1, 5.0), (Y, 0, 5.0), (A, 1, 5.0)])
    ok = make_pattern("Ok")
    lib = load_patterns([wall, ok], diagnostics)

    assert "Wall" not in lib
    assert [e.pattern_name for e in lib.rejected] == ["Wall"]
    assert isinstance(lib.rejected[0], InvalidPatternError)
    assert recorder.count(DiagnosticEvent.PATTERN_REJECTED_UNSOLVABLE) == 1
    for level in range(1, 10):
        assert all(p.name != "Wall" for p in lib.select_candidates(level, 1, 10))


def test_row_with_passable_member_is_fine():
    validate_pattern(make_pattern(obstacles=[(A, -1, 0.0), (J, 0, 0.0), (Y, 1, 0.0)]))


def test_row_grouping_uses_z_bucket():
    # same lanes but in different buckets: not a single row
    validate_pattern(make_pattern(obstacles=[(A, -1, 0.0), (Y, 0, 1.0), (A, 1, 2.0)]))
    with pytest.raises(InvalidPatternError):
        validate_pattern(make_pattern(obstacles=[(A, -1, 3.0), (Y, 0, 3.4), (A, 1, 3.9)]))


@pytest.mark.parametrize("kwargs", [
    dict(name=""),
    dict(difficulty=0),
    dict(difficulty=11),
    dict(levels=(5, 4)),
    dict(levels=(0, 4)),
    dict(length=0.0),
    dict(obstacles=()),
    dict(obstacles=[(J, 2, 0.0)]),
    dict(obstacles=[(J, 0, -1.0)]),
    dict(obstacles=[(J, 0, 25.0)]),
])
def test_structural_checks(kwargs):
    with pytest.raises(InvalidPatternError):
        validate_pattern(make_pattern(**kwargs))


def test_obstacle_after_palisade_inside_recovery_rejected():
    with pytest.raises(InvalidPatternError):
        validate_pattern(make_pattern(obstacles=[(P, 0, 0.0), (J, 1, 10.0)], length=20.0))
    validate_pattern(make_pattern(obstacles=[(P, 0, 0.0), (J, 1, 16.0)], length=20.0))
    validate_pattern(make_pattern(obstacles=[(J, 0, 0.0), (P, 1, 0.0)], length=20.0))


def test_duplicate_names_keep_first():
    first = make_pattern("Twin", difficulty=2)
    second = make_pattern("Twin", difficulty=4)
    lib = load_patterns([first, second])
    assert len(lib) == 1
    assert [p.difficulty for p in lib] == [2]
    assert lib.rejected[0].reason == "duplicate name"


def test_builtin_catalog_is_fully_valid():
    lib = default_library()
    assert len(lib) == len(BUILTIN_PATTERNS) == 14
    assert not lib.rejected


@pytest.mark.parametrize("level", range(1, 10))
def test_builtin_same_lane_gaps_fit_every_level(level):
    cfg = default_level_table()[level]
    for p in default_library().select_candidates(level, 1, 10):
        assert p.min_lane_gap >= cfg.min_obstacle_spacing, p.name


def test_min_lane_gap():
    assert make_pattern(obstacles=[(A, -1, 0.0), (J, 0, 0.0), (Y, 1, 0.0)]).min_lane_gap == float("inf")
    zig = make_pattern(obstacles=[(J, 0, 12.0), (J, 1, 3.0), (J, 0, 0.0), (Y, 0, 20.0)])
    assert zig.min_lane_gap == 8.0


def test_select_candidates_filters_in_insertion_order():
    lib = load_patterns([
        make_pattern("a", difficulty=2, levels=(1, 3)),
        make_pattern("b", difficulty=5, levels=(1, 9)),
        make_pattern("c", difficulty=3, levels=(4, 9)),
        make_pattern("d", difficulty=3, levels=(2, 9)),
    ])
    assert [p.name for p in lib.select_candidates(2, 1, 4)] == ["a", "d"]
    assert [p.name for p in lib.select_candidates(5, 3, 5)] == ["b", "c", "d"]
    assert lib.select_candidates(9, 9, 10) == ()


def test_registry_is_read_only():
    lib = load_patterns([make_pattern("a")])
    with pytest.raises(TypeError):
        lib._registry["b"] = make_pattern("b")


def test_pattern_from_dict_and_type_names():
    p = pattern_from_dict({
        "name": "Json", "difficulty": 4, "minLevel": 2, "maxLevel": 6, "length": 18,
        "obstacles": [{"type": "ObstacleJump", "lane": -1, "z": 0},
                      {"type": "broadjump", "lane": 1, "zOffset": 9}],
    })
    assert p.min_level == 2 and p.max_level == 6
    assert [o.type for o in p.obstacles] == [ObstacleType.JUMP, ObstacleType.BROAD_JUMP]
    assert p.obstacles[1].z_offset == 9.0


def test_malformed_json_records_are_reported_not_raised(tmp_path):
    path = tmp_path / "patterns.json"
    path.write_text(json.dumps({"patterns": [
        {"name": "Good", "difficulty": 2, "min_level": 1, "max_level": 3, "length": 10,
         "obstacles": [{"type": "Jump", "lane": 0, "z": 0}]},
        {"name": "NoLength", "difficulty": 2, "obstacles": []},
        {"name": "BadType", "difficulty": 2, "length": 5,
         "obstacles": [{"type": "Trampoline", "lane": 0, "z": 0}]},
    ]}), encoding="utf-8")
    lib = load_patterns(patterns_from_json(path))
    assert lib.names == ("Good",)
    assert sorted(e.pattern_name for e in lib.rejected) == ["BadType", "NoLength"]
