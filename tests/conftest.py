"""
Test configuration and fixtures for the recipe store.

Provides a configuration pointing at moto's in-memory DynamoDB, the recipe
table created from its schema definition, and a ready-to-use RecipeStore.
"""

import sys
from pathlib import Path
from unittest.mock import Mock

# Add parent directory to path so we can import recipe_store
sys.path.insert(0, str(Path(__file__).parent.parent))

import boto3
import pytest
from moto import mock_aws

from recipe_store import RecipeStore, RecipeStoreConfig
from recipe_store.core import TableGateway, create_table, create_table_gateway


@pytest.fixture
def test_config():
    """Recipe store configuration for mocked testing."""
    return RecipeStoreConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=None,  # Use default AWS endpoint for moto
        table_name="recipes",
        table_prefix="",
        environment="test",
        consistent_reads=True,
    )


@pytest.fixture
def mock_dynamodb_resource():
    """Mock DynamoDB resource."""
    with mock_aws():
        yield boto3.resource('dynamodb', region_name='us-east-1')


@pytest.fixture
def recipe_table(mock_dynamodb_resource, test_config):
    """Create the single recipe table (test_recipes) with both indexes."""
    return create_table(mock_dynamodb_resource, test_config.get_table_name())


@pytest.fixture
def gateway(recipe_table, test_config):
    """Real gateway talking to the mocked table."""
    return create_table_gateway(test_config)


@pytest.fixture
def store(gateway, test_config):
    """RecipeStore backed by the mocked table."""
    return RecipeStore(test_config, gateway)


@pytest.fixture
def mock_gateway():
    """Mock TableGateway for handler unit tests.

    Operation builders keep their real behaviour so transaction payloads can
    be inspected.
    """
    gateway = Mock(spec=TableGateway)
    gateway.table_name = "test_recipes"
    gateway._with_condition = TableGateway._with_condition
    for builder in ('put_operation', 'update_operation', 'delete_operation', 'condition_check_operation'):
        real = getattr(TableGateway, builder)
        setattr(gateway, builder, lambda *args, _real=real, **kwargs: _real(gateway, *args, **kwargs))
    return gateway


@pytest.fixture
def alice_recipe():
    """Valid create payload for a recipe with a fixed id."""
    return {
        "id": "r1",
        "title": "Tomato Soup",
        "description": "Weeknight soup",
        "ingredients": ["tomatoes", "stock", "salt"],
        "instructions": ["Simmer", "Blend"],
        "tags": ["soup", "vegetarian"],
    }
