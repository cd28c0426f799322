from items import fmt_decoded_items, parse_dimensions, parse_items
from models import Item


def test_parse_json_items_list():
    items, decoded, err = parse_items({
        "items": [
            {"id": 7, "name": " Fox ", "count": 3, "difficulty": 2},
            {"name": "Owl", "count": "2", "difficulty": "5"},
        ]
    })
    assert err is None
    assert items == [Item(7, "Fox", 3, 2), Item(1, "Owl", 2, 5)]
    assert decoded == [("Fox", 3, 2), ("Owl", 2, 5)]


def test_new_row_defaults_to_one_unit_of_difficulty_one():
    items, _decoded, err = parse_items({"items": [{"name": "Fox"}]})
    assert err is None
    assert items == [Item(0, "Fox", 1, 1)]


def test_parse_parallel_arrays():
    items, _decoded, err = parse_items({
        "name": ["A", "B"],
        "count": [4, 1],
        "difficulty": [1, 3],
    })
    assert err is None
    assert items == [Item(0, "A", 4, 1), Item(1, "B", 1, 3)]


def test_parse_form_arrays():
    items, _decoded, err = parse_items({
        "name[]": ["A", ""],
        "count[]": ["2", "5"],
        "difficulty[]": ["4", "2"],
    })
    assert err is None
    assert items == [Item(0, "A", 2, 4), Item(1, "", 5, 2)]


def test_out_of_range_values_pass_through_for_validation():
    items, _decoded, err = parse_items({"items": [{"name": "A", "count": -1, "difficulty": 9}]})
    assert err is None
    assert items == [Item(0, "A", -1, 9)]


def test_non_numeric_values_are_reported():
    items, decoded, err = parse_items({"items": [{"name": "A", "count": "lots"}]})
    assert items == [] and decoded == []
    assert "count" in err


def test_fractional_values_are_reported():
    _items, _decoded, err = parse_items({"items": [{"name": "A", "difficulty": 2.5}]})
    assert "difficulty" in err


def test_nothing_parsed():
    assert parse_items({}) == ([], [], "nothing parsed from request")
    assert parse_items({"unrelated": ["1"]})[2] == "nothing parsed from request"
    assert parse_items({"items": ["nope"]})[2] == "item 0 is not an object"


def test_parse_dimensions_shapes():
    assert parse_dimensions({"width": 4, "height": 3}) == (4, 3, None)
    assert parse_dimensions({"width": ["5"], "height": [""]}) == (5, None, None)
    assert parse_dimensions({"grid": [2, 6]}) == (2, 6, None)
    assert parse_dimensions({}) == (None, None, None)
    _w, _h, err = parse_dimensions({"width": "wide"})
    assert "width" in err


def test_fmt_decoded_items_sorts_by_difficulty_then_name():
    decoded = [("Owl", 2, 5), ("Bear", 1, 2), ("Ant", 4, 2)]
    assert fmt_decoded_items(decoded) == [("Ant", 4, 2), ("Bear", 1, 2), ("Owl", 2, 5)]
