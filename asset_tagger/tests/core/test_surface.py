"""
Tests for the drawing surface boundary.
"""

import logging
from unittest.mock import Mock

import pytest

from asset_tagger.core.annotation.state import Point
from asset_tagger.interfaces.surface import (
    DrawingSurface,
    HeadlessSurface,
    SurfaceBinding,
    SurfaceEventType,
)
from asset_tagger.interfaces.toolbar import (
    DEFAULT_TOOLBAR,
    capability_for,
    find_item,
)
from asset_tagger.core.annotation.state import EditorMode
from asset_tagger.core.errors import InvalidGeometry
from asset_tagger.tests.conftest import create_test_region


def make_binding(surface, asset_id="a"):
    handlers = {
        "on_selection_end": Mock(),
        "on_region_move_end": Mock(),
        "on_region_delete": Mock(),
        "on_region_selected": Mock(),
    }
    return SurfaceBinding(surface, asset_id, **handlers), handlers


class TestSurfaceBinding:
    def test_events_reach_bound_handlers(self):
        surface = HeadlessSurface()
        binding, handlers = make_binding(surface)
        binding.bind()
        region = create_test_region()

        surface.selection_end(region)
        surface.region_move_end("r1", region)
        surface.region_delete("r1")
        surface.region_selected("r1", additive=True)

        handlers["on_selection_end"].assert_called_once_with(region)
        handlers["on_region_move_end"].assert_called_once_with("r1", region)
        handlers["on_region_delete"].assert_called_once_with("r1")
        handlers["on_region_selected"].assert_called_once_with("r1", True)

    def test_unbind_stops_delivery(self):
        surface = HeadlessSurface()
        binding, handlers = make_binding(surface)
        binding.bind()
        binding.unbind()

        surface.region_delete("r1")

        handlers["on_region_delete"].assert_not_called()
        assert surface.events.listener_count(SurfaceEventType.REGION_DELETE) == 0

    def test_rebinding_replaces_previous_asset(self):
        surface = HeadlessSurface()
        first, first_handlers = make_binding(surface, "a")
        second, second_handlers = make_binding(surface, "b")
        first.bind()
        first.unbind()
        second.bind()

        surface.region_selected("r1")

        first_handlers["on_region_selected"].assert_not_called()
        second_handlers["on_region_selected"].assert_called_once_with("r1", False)

    def test_inactive_binding_ignores_event(self):
        surface = HeadlessSurface()
        binding, handlers = make_binding(surface)
        binding.bind()
        binding.active = False

        surface.region_delete("r1")

        handlers["on_region_delete"].assert_not_called()

    def test_rejected_shape_is_a_warning(self, caplog):
        surface = HeadlessSurface()
        binding, handlers = make_binding(surface)
        handlers["on_selection_end"].side_effect = InvalidGeometry("two points")
        binding.bind()

        with caplog.at_level(logging.WARNING):
            surface.selection_end(create_test_region())

        levels = [r.levelno for r in caplog.records]
        assert logging.WARNING in levels
        assert logging.ERROR not in levels


class TestHeadlessSurface:
    def test_records_commands(self):
        surface = HeadlessSurface()
        regions = [create_test_region()]
        surface.set_regions(regions)
        surface.set_mode("rect")
        surface.set_enabled(True)

        assert surface.regions == regions
        assert surface.regions is not regions
        assert surface.capability == "rect"
        assert surface.enabled

    def test_scale_to_source(self):
        surface = HeadlessSurface(scale_x=2.0, scale_y=2.0)
        scaled = surface.scale_to_source(create_test_region())
        assert scaled.points[2] == Point(200.0, 200.0)


def test_base_surface_commands_are_abstract():
    with pytest.raises(NotImplementedError):
        DrawingSurface().set_enabled(True)


def test_toolbar_lookup():
    assert find_item(DEFAULT_TOOLBAR, "drawPolygon").mode == EditorMode.POLYGON
    assert find_item(DEFAULT_TOOLBAR, "missing") is None
    assert capability_for(DEFAULT_TOOLBAR, EditorMode.RECTANGLE) == "rect"
    assert capability_for([], EditorMode.RECTANGLE) == EditorMode.RECTANGLE
