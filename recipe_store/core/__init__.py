"""
Core infrastructure components for DynamoDB operations.

This module contains the foundational components used across all domain modules:
- TableGateway: Thin wrapper over boto3 DynamoDB operations
- Factory functions for creating gateways
- Table definition helpers for provisioning the recipe table
"""

from .schema import build_table_definition, create_table
from .table_gateway import TableGateway, create_table_gateway, map_dynamodb_error

__all__ = [
    "TableGateway",
    "create_table_gateway",
    "map_dynamodb_error",
    "build_table_definition",
    "create_table",
]
