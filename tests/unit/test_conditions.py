"""Tests for the condition compiler."""

import pytest

from contentstore.errors import ConditionError
from contentstore.models.query import AllOf, AnyOf, Operator, Predicate
from contentstore.repositories.query.conditions import compile_condition, parse_condition


class TestScalars:
    def test_equality(self):
        assert compile_condition({"name": "ann"}) == ('"name" = ?', ["ann"])

    def test_implicit_and(self):
        clause, params = compile_condition({"a": 1, "b": 2})
        assert clause == '"a" = ? AND "b" = ?'
        assert params == [1, 2]

    def test_empty(self):
        assert compile_condition({}) == ("", [])
        assert compile_condition(None) == ("", [])

    def test_none_is_null(self):
        assert compile_condition({"parent": None}) == ('"parent" IS NULL', [])
        assert compile_condition({"parent": {"$not": None}}) == ('"parent" IS NOT NULL', [])

    def test_bool_sent_as_int(self):
        assert compile_condition({"active": True}) == ('"active" = ?', [1])

    def test_qualified(self):
        assert compile_condition({"id": 3}, "users") == ('"users"."id" = ?', [3])


class TestOperators:
    def test_gt(self):
        assert compile_condition({"age": {"$gt": 18}}) == ('"age" > ?', [18])

    @pytest.mark.parametrize(
        "token,sql",
        [("$gte", ">="), ("$lt", "<"), ("$lte", "<="), ("$not", "!="), ("$like", "LIKE"), ("$notlike", "NOT LIKE")],
    )
    def test_binary(self, token, sql):
        assert compile_condition({"x": {token: "v"}}) == (f'"x" {sql} ?', ["v"])

    def test_in(self):
        assert compile_condition({"id": {"$in": [1, 2, 3]}}) == ('"id" IN (?, ?, ?)', [1, 2, 3])

    def test_bare_list_means_in(self):
        assert compile_condition({"id": [4, 5]}) == ('"id" IN (?, ?)', [4, 5])

    def test_notin(self):
        assert compile_condition({"id": {"$notin": [1]}}) == ('"id" NOT IN (?)', [1])

    def test_empty_lists(self):
        assert compile_condition({"id": {"$in": []}}) == ("1 = 0", [])
        assert compile_condition({"id": {"$notin": []}}) == ("1 = 1", [])

    def test_between(self):
        assert compile_condition({"age": {"$between": [18, 30]}}) == ('"age" BETWEEN ? AND ?', [18, 30])

    def test_range_on_one_field(self):
        clause, params = compile_condition({"age": {"$gte": 18, "$lt": 65}})
        assert clause == '("age" >= ? AND "age" < ?)'
        assert params == [18, 65]


class TestCombinators:
    def test_or(self):
        clause, params = compile_condition({"$or": [{"a": 1}, {"b": 2}]})
        assert clause == '("a" = ? OR "b" = ?)'
        assert params == [1, 2]

    def test_or_mapping(self):
        clause, params = compile_condition({"$or": {"a": 1, "b": 2}})
        assert clause == '("a" = ? OR "b" = ?)'
        assert params == [1, 2]

    def test_nested(self):
        clause, params = compile_condition(
            {"status": "public", "$or": [{"author": 1}, {"$and": [{"views": {"$gt": 10}}, {"slug": {"$like": "a%"}}]}]}
        )
        assert clause == '"status" = ? AND ("author" = ? OR ("views" > ? AND "slug" LIKE ?))'
        assert params == ["public", 1, 10, "a%"]

    def test_params_follow_placeholders(self):
        clause, params = compile_condition({"$or": [{"a": {"$in": [1, 2]}}, {"b": {"$between": [3, 4]}}], "c": 5})
        assert clause.count("?") == len(params)
        assert params == [1, 2, 3, 4, 5]


class TestErrors:
    def test_unknown_operator(self):
        with pytest.raises(ConditionError, match=r"\$regex"):
            compile_condition({"x": {"$regex": "a"}})

    def test_between_needs_two(self):
        with pytest.raises(ConditionError):
            compile_condition({"x": {"$between": [1]}})

    def test_combinator_scalar(self):
        with pytest.raises(ConditionError):
            compile_condition({"$or": 1})

    def test_not_a_mapping(self):
        with pytest.raises(ConditionError):
            compile_condition("a = 1")


class TestParse:
    def test_tree(self):
        tree = parse_condition({"age": {"$gt": 18}, "$or": [{"a": 1}, {"b": 2}]})
        assert tree == AllOf(
            (
                Predicate("age", Operator.GT, 18),
                AnyOf((Predicate("a", Operator.EQ, 1), Predicate("b", Operator.EQ, 2))),
            ),
            grouped=False,
        )

    def test_from_token(self):
        assert Operator.from_token("$notin") is Operator.NOT_IN
