"""
Tests for key construction and access patterns (recipe_store/keys.py).
"""

import pytest

from recipe_store.exceptions import InvalidIdentifierError, ValidationError
from recipe_store.keys import (
    ACCESS_PATTERNS,
    RECORD_TYPE_INDEX,
    SORT_KEY_INDEX,
    ItemKey,
    RecordType,
    key_for_record,
    like_key,
    recipe_key,
    user_key,
)
from recipe_store.utils import build_key_condition


class TestKeyConstruction:
    """Keys are pure functions of logical identifiers."""

    def test_user_key(self):
        assert user_key("alice") == ItemKey("USER#alice", "USER#alice")

    def test_recipe_key_lives_in_owner_partition(self):
        key = recipe_key("alice", "r1")

        assert key.pk == "USER#alice"
        assert key.sk == "RECIPE#r1"
        assert key.as_dict() == {"PK": "USER#alice", "SK": "RECIPE#r1"}

    def test_like_key(self):
        key = like_key("r1", "bob")

        assert key == ItemKey("LIKE#r1", "LIKE#bob")
        assert str(key) == "LIKE#r1|LIKE#bob"

    def test_keys_are_deterministic(self):
        assert recipe_key("alice", "r1") == recipe_key("alice", "r1")
        assert like_key("r1", "bob") != like_key("r1", "carol")

    @pytest.mark.parametrize("build", [
        lambda: user_key(""),
        lambda: user_key(None),
        lambda: recipe_key("", "r1"),
        lambda: recipe_key("alice", ""),
        lambda: like_key("", "bob"),
        lambda: like_key("r1", ""),
    ])
    def test_empty_components_rejected(self, build):
        with pytest.raises(InvalidIdentifierError):
            build()

    def test_invalid_identifier_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            recipe_key("alice", "")

        assert exc_info.value.errors[0]['field'] == "recipe_id"

    def test_key_for_record(self):
        assert key_for_record(RecordType.USER, {"username": "alice"}) == user_key("alice")
        assert key_for_record(RecordType.RECIPE, {"username": "alice", "id": "r1"}) == recipe_key("alice", "r1")
        assert key_for_record(RecordType.LIKE, {"recipeId": "r1", "username": "bob"}) == like_key("r1", "bob")


class TestAccessPatterns:
    """Each query intent is served by a known index and key prefix."""

    def test_recipes_by_owner_uses_base_table(self):
        pattern = ACCESS_PATTERNS['recipes_by_owner']

        assert pattern.index_name is None
        assert pattern.partition_value("alice") == "USER#alice"
        assert pattern.sort_prefix == "RECIPE#"

    def test_recipe_by_id_uses_sort_key_index(self):
        pattern = ACCESS_PATTERNS['recipe_by_id']

        assert pattern.index_name == SORT_KEY_INDEX
        assert pattern.partition_value("r1") == "RECIPE#r1"

    def test_chronological_listing_uses_record_type_index(self):
        pattern = ACCESS_PATTERNS['recipes_by_created_at']

        assert pattern.index_name == RECORD_TYPE_INDEX
        assert pattern.partition_value() == "RECIPE"
        assert pattern.sort_attribute == "createdAt"

    def test_user_by_name(self):
        pattern = ACCESS_PATTERNS['user_by_name']

        assert pattern.index_name is None
        assert pattern.partition_value("alice") == user_key("alice").pk
        assert pattern.sort_prefix == "USER#"

    def test_likes_patterns(self):
        assert ACCESS_PATTERNS['likes_for_recipe'].partition_value("r1") == "LIKE#r1"
        assert ACCESS_PATTERNS['likes_by_user'].partition_value("bob") == "LIKE#bob"
        assert ACCESS_PATTERNS['likes_by_user'].index_name == SORT_KEY_INDEX

    def test_pattern_rejects_empty_identifier(self):
        with pytest.raises(InvalidIdentifierError):
            ACCESS_PATTERNS['recipes_by_owner'].partition_value("")

    def test_build_key_condition_with_sort_prefix(self):
        condition = build_key_condition(ACCESS_PATTERNS['recipes_by_owner'], "alice")
        expression = condition.get_expression()

        assert expression['operator'] == 'AND'
        partition, sort = expression['values']
        assert partition.get_expression()['values'][1] == "USER#alice"
        assert sort.get_expression()['operator'] == 'begins_with'
        assert sort.get_expression()['values'][1] == "RECIPE#"

    def test_build_key_condition_partition_only(self):
        condition = build_key_condition(ACCESS_PATTERNS['recipe_by_id'], "r1")
        expression = condition.get_expression()

        assert expression['operator'] == '='
        assert expression['values'][1] == "RECIPE#r1"
