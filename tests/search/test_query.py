"""Tests for search queries and the query builder."""

import pytest

from polysearch.query import OrderClause, SearchQuery, SearchQueryBuilder, WhereClause


class TestSearchQuery:
    """Test the immutable query value."""

    def test_defaults(self):
        query = SearchQuery(text="laravel")

        assert query.fields == ()
        assert query.algorithm is None
        assert query.limit is None
        assert query.offset == 0
        assert query.min_score == 0.0

    def test_immutable(self):
        query = SearchQuery(text="laravel")

        with pytest.raises(AttributeError):
            query.text = "symfony"

    @pytest.mark.parametrize("kwargs", [{"limit": -1}, {"offset": -5}])
    def test_rejects_negative_paging(self, kwargs):
        with pytest.raises(ValueError, match="non-negative"):
            SearchQuery(text="laravel", **kwargs)

    def test_to_dict(self):
        query = SearchQuery(
            text="laravel",
            fields=("title",),
            wheres=(WhereClause("status", "=", "published"),),
            orders=(OrderClause("created_at", "desc"),),
        )

        data = query.to_dict()

        assert data["fields"] == ["title"]
        assert data["wheres"] == [["status", "=", "published"]]
        assert data["orders"] == [["created_at", "desc"]]


class TestSearchQueryBuilder:
    """Test fluent query building."""

    def test_chained_build(self):
        """Every setter returns the builder."""
        query = (
            SearchQueryBuilder()
            .query("laravel")
            .in_fields(["title", "body"])
            .weights({"title": 2.0})
            .using("fuzzy")
            .where("status", "published")
            .order_by("created_at", "DESC")
            .limit(10)
            .offset(5)
            .min_score(1.5)
            .options({"threshold": 1})
            .build()
        )

        assert query.text == "laravel"
        assert query.fields == ("title", "body")
        assert query.weights == {"title": 2.0}
        assert query.algorithm == "fuzzy"
        assert query.wheres == (WhereClause("status", "=", "published"),)
        assert query.orders == (OrderClause("created_at", "desc"),)
        assert query.limit == 10
        assert query.offset == 5
        assert query.min_score == 1.5
        assert query.options == {"threshold": 1}

    def test_single_field(self):
        assert SearchQueryBuilder().in_fields("title").build().fields == ("title",)

    def test_where_with_operator(self):
        query = (
            SearchQueryBuilder()
            .where("views_count", ">=", 10)
            .where("title", "LIKE", "%vel%")
            .build()
        )

        assert query.wheres == (
            WhereClause("views_count", ">=", 10),
            WhereClause("title", "like", "%vel%"),
        )

    def test_where_rejects_unknown_operator(self):
        with pytest.raises(ValueError, match="Unsupported where operator"):
            SearchQueryBuilder().where("views_count", "~", 10)

    def test_order_rejects_unknown_direction(self):
        with pytest.raises(ValueError, match="asc"):
            SearchQueryBuilder().order_by("title", "sideways")

    @pytest.mark.parametrize("weight", [0, -1.0])
    def test_weights_must_be_positive(self, weight):
        with pytest.raises(ValueError, match="must be positive"):
            SearchQueryBuilder().weights({"title": weight})

    def test_negative_limit(self):
        with pytest.raises(ValueError):
            SearchQueryBuilder().limit(-1)

    def test_options_are_merged(self):
        query = (
            SearchQueryBuilder()
            .options({"threshold": 1})
            .options({"max_length": 50})
            .build()
        )

        assert query.options == {"threshold": 1, "max_length": 50}

    def test_build_is_a_snapshot(self):
        builder = SearchQueryBuilder().query("laravel").in_fields(["title"])
        query = builder.build()

        builder.where("status", "draft")

        assert query.wheres == ()

    def test_get_without_engine(self):
        with pytest.raises(RuntimeError, match="No search engine"):
            SearchQueryBuilder().query("laravel").get([])
