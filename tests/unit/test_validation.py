"""
Tests for the validation layer and write DTOs.
"""

import pytest

from recipe_store.exceptions import ValidationError
from recipe_store.models import LikeCreate, RecipeCreate, RecipePatch, UserCreate, UserUpdate
from recipe_store.validation import validate


def violation_fields(error: ValidationError):
    return {violation['field'] for violation in error.errors}


class TestRecipeCreate:

    def test_valid_payload(self, alice_recipe):
        recipe_data = validate(RecipeCreate, alice_recipe)

        assert recipe_data.id == "r1"
        assert recipe_data.title == "Tomato Soup"
        assert recipe_data.like_count == 0

    def test_missing_title(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(RecipeCreate, {"ingredients": ["water"]})

        assert violation_fields(exc_info.value) == {"title"}
        assert exc_info.value.errors[0]['type'] == "missing"

    def test_blank_title(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(RecipeCreate, {"title": "   "})

        assert "title" in violation_fields(exc_info.value)

    def test_title_too_long(self):
        with pytest.raises(ValidationError):
            validate(RecipeCreate, {"title": "x" * 201})

    def test_nonzero_like_count_on_create(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(RecipeCreate, {"title": "Soup", "likeCount": 5})

        assert "like_count" in violation_fields(exc_info.value) or "likeCount" in violation_fields(exc_info.value)

    def test_invalid_recipe_id(self):
        with pytest.raises(ValidationError):
            validate(RecipeCreate, {"id": "has spaces", "title": "Soup"})

    def test_every_violation_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(RecipeCreate, {"id": "bad id!", "ingredients": "not-a-list"})

        assert {"id", "title", "ingredients"} <= violation_fields(exc_info.value)

    def test_unknown_attributes_become_extensions(self):
        recipe_data = validate(RecipeCreate, {"title": "Soup", "cuisine": "thai", "servings": 4})

        assert recipe_data.extensions == {"cuisine": "thai", "servings": 4}

    def test_reserved_extension_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(RecipeCreate, {"title": "Soup", "recordType": "USER"})

        assert "extensions" in violation_fields(exc_info.value)

    def test_camel_case_aliases_accepted(self):
        recipe_data = validate(RecipeCreate, {"title": "Soup", "likeCount": 0})
        assert recipe_data.like_count == 0


class TestRecipePatch:

    def test_partial_patch(self):
        patch = validate(RecipePatch, {"title": "New title"})

        assert patch.changed_attributes() == {"title": "New title"}

    def test_like_count_cannot_be_patched(self):
        with pytest.raises(ValidationError):
            validate(RecipePatch, {"likeCount": 10})

    @pytest.mark.parametrize("field", ["id", "username", "recordType", "createdAt", "PK"])
    def test_identity_fields_cannot_be_patched(self, field):
        with pytest.raises(ValidationError):
            validate(RecipePatch, {"title": "ok", field: "x"})

    def test_empty_patch_rejected(self):
        with pytest.raises(ValidationError):
            validate(RecipePatch, {})

    def test_title_cannot_be_removed(self):
        with pytest.raises(ValidationError):
            validate(RecipePatch, {"title": None})

    def test_explicit_none_removes_optional_field(self):
        patch = validate(RecipePatch, {"description": None})

        assert patch.changed_attributes() == {"description": None}

    def test_extensions_are_patchable(self):
        patch = validate(RecipePatch, {"cuisine": "thai"})

        assert patch.changed_attributes() == {"cuisine": "thai"}


class TestUserDtos:

    def test_valid_user(self):
        user_data = validate(UserCreate, {"username": "alice", "displayName": "Alice", "email": "a@example.com"})

        assert user_data.display_name == "Alice"

    @pytest.mark.parametrize("username", ["", "has space", "x" * 65, "semi;colon"])
    def test_invalid_username(self, username):
        with pytest.raises(ValidationError):
            validate(UserCreate, {"username": username})

    def test_invalid_email(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(UserCreate, {"username": "alice", "email": "not-an-email"})

        assert violation_fields(exc_info.value) == {"email"}

    def test_username_not_updatable(self):
        with pytest.raises(ValidationError):
            validate(UserUpdate, {"username": "mallory"})

    def test_update_uses_disk_names(self):
        update = validate(UserUpdate, {"display_name": "Alice B"})

        assert update.changed_attributes() == {"displayName": "Alice B"}


class TestValidate:

    def test_returns_existing_instance_unchanged(self):
        like_data = LikeCreate(recipe_id="r1", username="bob")

        assert validate(LikeCreate, like_data) is like_data

    def test_none_candidate_reports_missing_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(LikeCreate, None)

        assert violation_fields(exc_info.value) == {"recipeId", "username"}

    def test_message_lists_violations(self):
        with pytest.raises(ValidationError) as exc_info:
            validate(LikeCreate, {"recipeId": "r1", "username": ""})

        assert "username" in exc_info.value.message
