"""
Tests for the filter compiler and the parameter serializer.
"""

import json

import pytest

from crosstable.exceptions import InvalidQueryError
from crosstable.queries import Query
from crosstable.querydsl import AddressCircle, Criterion, LogicGroup, Operator, and_, field, or_
from crosstable.querydsl.compilers import filter_compiler, param_serializer
from crosstable.querydsl.compilers.utils import dump_json, encode_value, join_list


class TestFilterCompilerToWire:
    """Top-level node list to wire object."""

    def test_no_nodes(self):
        assert filter_compiler.to_wire([]) is None

    def test_single_criterion(self):
        assert filter_compiler.to_wire([field("country").equal("US")]) == {"country": {"$eq": "US"}}

    def test_sequence_value_becomes_list(self):
        wire = filter_compiler.to_wire([field("region").in_("CA", "NM", "FL")])
        assert wire == {"region": {"$in": ["CA", "NM", "FL"]}}

    def test_distinct_fields_flatten(self):
        nodes = [field("name").begins_with("McDonald's"), field("category").begins_with("Food & Beverage")]
        assert filter_compiler.to_wire(nodes) == {
            "name": {"$bw": "McDonald's"},
            "category": {"$bw": "Food & Beverage"},
        }

    def test_repeated_field_wraps_in_and(self):
        nodes = [field("rating").greater_than(3), field("rating").less_than(5)]
        assert filter_compiler.to_wire(nodes) == {"$and": [{"rating": {"$gt": 3}}, {"rating": {"$lt": 5}}]}

    def test_group_beside_criterion_wraps_in_and(self):
        nodes = [
            field("region").in_("CA", "NM", "FL"),
            or_(field("name").begins_with("Coffee"), field("name").begins_with("Star")),
        ]
        assert filter_compiler.to_wire(nodes) == {
            "$and": [
                {"region": {"$in": ["CA", "NM", "FL"]}},
                {"$or": [{"name": {"$bw": "Coffee"}}, {"name": {"$bw": "Star"}}]},
            ]
        }

    def test_single_group_is_not_wrapped(self):
        group = or_(field("a").equal(1), field("b").equal(2))
        assert filter_compiler.to_wire([group]) == {"$or": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]}

    def test_nesting_fidelity(self):
        a, b, c = field("a").equal(1), field("b").equal(2), field("c").equal(3)
        wire = filter_compiler.to_wire([or_(a, and_(b, c))])
        assert wire == {"$or": [{"a": {"$eq": 1}}, {"$and": [{"b": {"$eq": 2}}, {"c": {"$eq": 3}}]}]}

    def test_geo_inside_group_serializes(self, century_city):
        wire = filter_compiler.to_wire([and_(field("category").begins_with("Food"), century_city)])
        assert wire == {
            "$and": [
                {"category": {"$bw": "Food"}},
                {"$geo": {"$circle": {"$center": [34.06018, -118.41835], "$meters": 5000}}},
            ]
        }

    def test_blank_serializes_boolean(self):
        assert filter_compiler.to_wire([field("tel").is_blank()]) == {"tel": {"$blank": True}}

    def test_empty_group_raises(self):
        with pytest.raises(InvalidQueryError, match="no children"):
            filter_compiler.to_wire([and_()])

    def test_nested_empty_group_raises(self):
        with pytest.raises(InvalidQueryError, match="no children"):
            filter_compiler.to_wire([or_(field("a").equal(1), and_())])

    def test_arity_mismatch_raises(self):
        with pytest.raises(InvalidQueryError):
            filter_compiler.to_wire([Criterion("region", Operator.IN, "CA")])


class TestFilterCompilerFromWire:
    """Wire object back to top-level nodes."""

    def test_none(self):
        assert filter_compiler.from_wire(None) == []

    def test_flat_object(self):
        nodes = filter_compiler.from_wire({"name": {"$bw": "Mc"}, "category": {"$bw": "Food"}})
        assert nodes == [field("name").begins_with("Mc"), field("category").begins_with("Food")]

    def test_top_level_and_is_unwrapped(self):
        wire = {"$and": [{"region": {"$in": ["CA"]}}, {"$or": [{"a": {"$eq": 1}}, {"b": {"$eq": 2}}]}]}
        nodes = filter_compiler.from_wire(wire)
        assert nodes == [field("region").in_("CA"), or_(field("a").equal(1), field("b").equal(2))]

    def test_several_keys_in_child_are_an_and(self):
        nodes = filter_compiler.from_wire({"$or": [{"a": {"$eq": 1}, "b": {"$eq": 2}}, {"c": {"$eq": 3}}]})
        assert nodes == [or_(and_(field("a").equal(1), field("b").equal(2)), field("c").equal(3))]

    def test_geo_entry(self, century_city):
        nodes = filter_compiler.from_wire({"$or": [{"$geo": century_city.to_dict()}, {"a": {"$eq": 1}}]})
        assert nodes[0].children[0] == Criterion.geo(century_city)

    def test_address_geo_entry(self):
        circle = AddressCircle("1801 avenue of the stars, century city, ca", 5000)
        wire = filter_compiler.to_wire([and_(field("a").equal(1), circle)])
        assert wire == {"$and": [{"a": {"$eq": 1}}, {"$geo": circle.to_dict()}]}
        assert filter_compiler.from_wire(wire) == [field("a").equal(1), Criterion.geo(circle)]

    @pytest.mark.parametrize(
        "wire",
        [
            ["country"],
            {"country": "US"},
            {"country": {}},
            {"$and": {"a": {"$eq": 1}}},
            {"$or": [{}]},
            {"country": {"$like": "US"}},
        ],
    )
    def test_malformed(self, wire):
        with pytest.raises(InvalidQueryError):
            filter_compiler.from_wire(wire)

    def test_compile_then_parse_keeps_structure(self):
        tree = [
            field("region").in_("CA", "NM"),
            or_(field("a").equal(1), and_(field("b").equal(2), field("c").less_than(3))),
        ]
        parsed = filter_compiler.from_wire(json.loads(dump_json(filter_compiler.to_wire(tree))))
        assert parsed == tree
        assert isinstance(parsed[1], LogicGroup)


class TestParamSerializer:
    """Ordered wire parameters."""

    def test_key_order(self, century_city):
        q = (
            Query()
            .include_row_count()
            .only("name", "tel")
            .search("coffee")
            .offset(20)
            .limit(5)
            .sort_desc("rating")
            .within(century_city)
        )
        q.field("country").equal("US")
        assert list(param_serializer.serialize(q)) == [
            "filters",
            "geo",
            "sort",
            "limit",
            "offset",
            "q",
            "select",
            "include_count",
        ]

    def test_unset_params_are_omitted(self):
        assert param_serializer.serialize(Query()) == {}

    def test_determinism(self, century_city):
        def build():
            q = Query().within(century_city).limit(10).sort_asc("$distance")
            q.field("region").in_("CA", "NM", "FL")
            q.field("name").begins_with("Star")
            return q

        first, second = param_serializer.serialize(build()), param_serializer.serialize(build())
        assert first == second
        assert json.dumps(first) == json.dumps(second)

    def test_override_wins_and_keeps_position(self):
        q = Query().limit(5).search("coffee").add_param("limit", 10)
        params = param_serializer.serialize(q)
        assert params == {"limit": "10", "q": "coffee"}
        assert list(params) == ["limit", "q"]

    def test_override_appended_when_new(self):
        q = Query().limit(5).add_param("threshold", "confident")
        assert list(param_serializer.serialize(q).items()) == [("limit", "5"), ("threshold", "confident")]

    def test_from_wire_decodes_json_values(self):
        decoded = param_serializer.from_wire({"filters": '{"a":{"$eq":1}}', "q": "Fried Chicken, Los Angeles", "limit": "5"})
        assert decoded == {"filters": {"a": {"$eq": 1}}, "q": "Fried Chicken, Los Angeles", "limit": 5}


class TestEncodeValue:
    """Scalar encoding helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("US", "US"),
            (True, "true"),
            (False, "false"),
            (5, "5"),
            (2.5, "2.5"),
            ({"a": [1, 2]}, '{"a":[1,2]}'),
            (["x", "y"], '["x","y"]'),
            (None, ""),
        ],
    )
    def test_encode(self, value, expected):
        assert encode_value(value) == expected

    def test_dump_json_keeps_unicode(self):
        assert dump_json({"name": "Café"}) == '{"name":"Café"}'

    def test_join_list(self):
        assert join_list(["address", "country"]) == "address,country"
