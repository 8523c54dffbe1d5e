import asset_tagger.utils.i18n  # noqa:F401

import pytest
from easydict import EasyDict as edict

from .env import coerce_value, load_cfg_from_env


def test_load_cfg_from_env():
    input_dict = {"TAGGER_a": 2, "TAGGER_tags__colormap": "Set3", "OTHER": 1}
    loaded = load_cfg_from_env(edict(), input_dict)
    assert loaded.a == 2
    assert loaded.tags.colormap == "Set3"
    assert "OTHER" not in loaded


def test_load_cfg_from_env_keeps_sibling_entries():
    cfg = edict({"tags": {"colormap": "tab20", "palette_size": 20}})
    loaded = load_cfg_from_env(cfg, {"TAGGER_tags__palette_size": "8"})
    assert loaded.tags.colormap == "tab20"
    assert loaded.tags.palette_size == 8


@pytest.mark.parametrize(
    "current,value,expected",
    [
        (True, "no", False),
        (False, "Yes", True),
        (1.5, "2", 2.0),
        ([], "a, b,", ["a", "b"]),
        ("x", "y", "y"),
        (None, "7", "7"),
    ],
)
def test_coerce_value(current, value, expected):
    assert coerce_value(current, value) == expected


def test_bad_number_is_rejected():
    cfg = edict({"size": 3})
    with pytest.raises(ValueError):
        load_cfg_from_env(cfg, {"TAGGER_size": "many"})
