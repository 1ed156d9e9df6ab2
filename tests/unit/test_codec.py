"""
Tests for the record codec (RecordMixin, encode_record/decode_record).
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from recipe_store import decode_record, encode_record
from recipe_store.exceptions import MalformedRecordError
from recipe_store.models import Like, Recipe, User

NOW = datetime(2024, 5, 1, 12, 30, 15, 123456, tzinfo=timezone.utc)


def make_recipe(**overrides) -> Recipe:
    data = dict(
        id="r1",
        username="alice",
        title="Tomato Soup",
        ingredients=["tomatoes", "salt"],
        instructions=["Simmer"],
        tags=["soup"],
        like_count=0,
        created_at=NOW,
        updated_at=NOW,
    )
    data.update(overrides)
    return Recipe(**data)


class TestEncode:
    """Entity -> raw item."""

    def test_recipe_item_layout(self):
        item = encode_record(make_recipe())

        assert item['PK'] == "USER#alice"
        assert item['SK'] == "RECIPE#r1"
        assert item['recordType'] == "RECIPE"
        assert item['likeCount'] == 0
        assert item['createdAt'] == "2024-05-01T12:30:15.123456+00:00"
        assert item['ingredients'] == ["tomatoes", "salt"]
        assert 'description' not in item  # None values are omitted
        assert 'extensions' not in item

    def test_like_item_layout(self):
        like = Like(recipe_id="r1", username="bob", recipe_owner="alice", created_at=NOW)
        item = like.to_dynamodb_item()

        assert item['PK'] == "LIKE#r1"
        assert item['SK'] == "LIKE#bob"
        assert item['recipeId'] == "r1"
        assert item['recipeOwner'] == "alice"
        assert item['recordType'] == "LIKE"

    def test_user_item_layout(self):
        user = User(username="alice", display_name="Alice", created_at=NOW, updated_at=NOW)
        item = user.to_dynamodb_item()

        assert item['PK'] == item['SK'] == "USER#alice"
        assert item['displayName'] == "Alice"

    def test_timestamps_normalized_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        recipe = make_recipe(created_at=datetime(2024, 5, 1, 14, 30, tzinfo=plus_two))

        assert recipe.created_at == datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        assert encode_record(recipe)['createdAt'] == "2024-05-01T12:30:00.000000+00:00"

    def test_naive_timestamps_assumed_utc(self):
        recipe = make_recipe(created_at=datetime(2024, 5, 1, 12, 30))

        assert recipe.created_at.tzinfo is not None
        assert recipe.created_at.utcoffset() == timedelta(0)

    def test_extension_floats_become_decimals(self):
        item = encode_record(make_recipe(extensions={"rating": 4.5, "servings": 2}))

        assert item['rating'] == Decimal("4.5")
        assert item['servings'] == 2

    def test_extensions_cannot_use_reserved_names(self):
        with pytest.raises(ValueError):
            make_recipe(extensions={"likeCount": 99})
        with pytest.raises(ValueError):
            make_recipe(extensions={"PK": "USER#mallory"})


class TestDecode:
    """Raw item -> entity."""

    def test_round_trip_preserves_every_field(self):
        recipe = make_recipe(description="Weeknight soup", like_count=3,
                             extensions={"cuisine": "italian", "rating": Decimal("4.5")})

        assert decode_record(encode_record(recipe)) == recipe

    def test_decimal_counts_become_ints(self):
        item = encode_record(make_recipe())
        item['likeCount'] = Decimal("7")

        recipe = Recipe.from_dynamodb_item(item)

        assert recipe.like_count == 7
        assert isinstance(recipe.like_count, int)

    def test_unknown_attributes_preserved_as_extensions(self):
        item = encode_record(make_recipe())
        item['cookingTime'] = Decimal("25")
        item['image'] = "https://example.com/soup.png"

        recipe = decode_record(item)

        assert recipe.extensions == {"cookingTime": Decimal("25"), "image": "https://example.com/soup.png"}
        assert encode_record(recipe)['image'] == "https://example.com/soup.png"

    def test_dispatch_on_record_type(self):
        like = Like(recipe_id="r1", username="bob", recipe_owner="alice", created_at=NOW)
        user = User(username="alice", created_at=NOW, updated_at=NOW)

        assert isinstance(decode_record(encode_record(like)), Like)
        assert isinstance(decode_record(encode_record(user)), User)

    def test_unknown_record_type(self):
        with pytest.raises(MalformedRecordError, match="Unknown recordType"):
            decode_record({'PK': 'X#1', 'SK': 'X#1', 'recordType': 'COMMENT'})

    def test_missing_required_attribute(self):
        item = encode_record(make_recipe())
        del item['title']

        with pytest.raises(MalformedRecordError) as exc_info:
            decode_record(item)

        assert exc_info.value.item_key == {'PK': 'USER#alice', 'SK': 'RECIPE#r1'}

    def test_missing_like_count_is_not_defaulted(self):
        item = encode_record(make_recipe())
        del item['likeCount']

        with pytest.raises(MalformedRecordError):
            decode_record(item)

    def test_negative_like_count_rejected(self):
        item = encode_record(make_recipe())
        item['likeCount'] = Decimal("-1")

        with pytest.raises(MalformedRecordError):
            decode_record(item)

    def test_wrong_record_type_for_class(self):
        item = encode_record(make_recipe())

        with pytest.raises(MalformedRecordError, match="Expected recordType"):
            User.from_dynamodb_item(item)

    def test_key_mismatch_detected(self):
        item = encode_record(make_recipe())
        item['PK'] = "USER#mallory"

        with pytest.raises(MalformedRecordError, match="does not match"):
            decode_record(item)

    def test_api_dict_flattens_extensions(self):
        data = make_recipe(extensions={"cuisine": "italian"}).to_api_dict()

        assert data['cuisine'] == "italian"
        assert data['likeCount'] == 0
        assert 'extensions' not in data
