"""
Physical table definition for the recipe table.

Builds the ``create_table`` request from ``RecipeTable`` metadata: string
``PK``/``SK`` keys, the two overloaded indexes with every attribute projected,
and on-demand billing.
"""

import logging
from typing import Any, Dict

from botocore.exceptions import BotoCoreError, ClientError

from ..models.domain_models import RecipeTable, TableMeta
from .table_gateway import map_botocore_error, map_dynamodb_error

logger = logging.getLogger(__name__)


def build_table_definition(table_name: str, meta: type = RecipeTable) -> Dict[str, Any]:
    """
    Build the keyword arguments for ``create_table``.

    Args:
        table_name: Full (prefixed) table name
        meta: Table metadata class

    Returns:
        Dict suitable for ``dynamodb.create_table(**definition)``
    """
    key_schema = [{'AttributeName': meta.partition_key, 'KeyType': 'HASH'}]
    if meta.sort_key:
        key_schema.append({'AttributeName': meta.sort_key, 'KeyType': 'RANGE'})

    global_indexes = []
    for gsi in meta.gsis:
        gsi_key_schema = [{'AttributeName': gsi.partition_key, 'KeyType': 'HASH'}]
        if gsi.sort_key:
            gsi_key_schema.append({'AttributeName': gsi.sort_key, 'KeyType': 'RANGE'})

        if gsi.projection is None:
            projection = {'ProjectionType': 'ALL'}
        else:
            projection = {'ProjectionType': 'INCLUDE', 'NonKeyAttributes': list(gsi.projection)}

        global_indexes.append({
            'IndexName': gsi.name,
            'KeySchema': gsi_key_schema,
            'Projection': projection,
        })

    definition = {
        'TableName': table_name,
        'KeySchema': key_schema,
        'AttributeDefinitions': [
            {'AttributeName': attribute, 'AttributeType': 'S'}
            for attribute in meta.get_key_attributes()
        ],
        'BillingMode': 'PAY_PER_REQUEST',
    }
    if global_indexes:
        definition['GlobalSecondaryIndexes'] = global_indexes
    return definition


def create_table(dynamodb_resource, table_name: str, meta: type = RecipeTable):
    """
    Create the table and wait until it is active.

    Args:
        dynamodb_resource: boto3 DynamoDB service resource
        table_name: Full (prefixed) table name
        meta: Table metadata class

    Returns:
        boto3 Table resource
    """
    if not issubclass(meta, TableMeta):
        raise TypeError(f"{meta!r} is not a TableMeta subclass")

    try:
        table = dynamodb_resource.create_table(**build_table_definition(table_name, meta))
        table.wait_until_exists()
    except ClientError as e:
        raise map_dynamodb_error(e, "CreateTable", table_name) from e
    except BotoCoreError as e:
        raise map_botocore_error(e, "CreateTable", table_name) from e

    logger.info(f"Created table {table_name}")
    return table
