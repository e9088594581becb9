import pytest

from zeefax.config import load_default_categories
from zeefax.models import CategoryConfig
from zeefax.navigation import Navigator, default_navigator
from zeefax.palette import Color


def test_page_order(navigator):
    assert navigator.pages == (100, 110, 111, 112, 113, 120, 121, 122, 123, 199)


def test_adjacent_boundaries(navigator):
    assert navigator.adjacent(100) == (None, 110)
    assert navigator.adjacent(113) == (112, 120)
    assert navigator.adjacent(199) == (123, None)
    assert navigator.adjacent(555) == (None, None)


def test_category_for_page_covers_reserved_window(navigator):
    assert navigator.category_for_page(111).key == "tech"
    assert navigator.category_for_page(119).key == "tech"
    assert navigator.category_for_page(120).key == "design"
    assert navigator.category_for_page(130) is None
    assert navigator.category_for_page(100) is None


def test_resolve_labels(navigator):
    page = navigator.resolve(112)

    assert page.label == "Technology – Signals"
    assert page.category_key == "tech"
    assert page.subpage == 2
    assert navigator.resolve(118) is None
    assert navigator.is_valid(199)


def test_default_navigator_resolves_every_category():
    navigator = default_navigator()

    assert navigator is default_navigator()
    for category in load_default_categories():
        assert navigator.category_for_page(category.page + 1) is category
    assert navigator.adjacent(100)[0] is None
    assert navigator.adjacent(199)[1] is None


def _category(key, page):
    return CategoryConfig(key=key, page=page, name=key, short_name=key.upper(), color=Color.RED)


def test_overlapping_ranges_rejected():
    with pytest.raises(ValueError):
        Navigator([_category("a", 110), _category("b", 115)])


def test_reserved_pages_rejected():
    with pytest.raises(ValueError):
        Navigator([_category("a", 195)])


def test_duplicate_keys_rejected():
    with pytest.raises(ValueError):
        Navigator([_category("a", 110), _category("a", 120)])
