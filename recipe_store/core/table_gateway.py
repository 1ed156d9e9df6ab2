"""
Thin DynamoDB Table Gateway

Lightweight wrapper around boto3 for the single recipe table. The gateway:

1. Creates boto3 resource and Table handles lazily from ``RecipeStoreConfig``
2. Exposes native DynamoDB operations (point reads, conditional writes,
   transactional writes, paged queries) without hiding their cost
3. Translates every vendor failure into the closed ``recipe_store.exceptions``
   taxonomy, so nothing above this module sees a ``ClientError``

Read/write APIs in ``recipe_store.handlers`` compose these building blocks;
the gateway itself knows nothing about users, recipes or likes.
"""

import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ..config import RecipeStoreConfig
from ..exceptions import (
    ConflictError,
    ItemNotFoundError,
    StorageUnavailableError,
    TransactionAbortedError,
    ValidationError,
)
from ..keys import PARTITION_KEY, SORT_KEY

logger = logging.getLogger(__name__)

# DynamoDB limit on operations in one TransactWriteItems call
MAX_TRANSACTION_ITEMS = 100

THROTTLING_ERRORS = {
    'ProvisionedThroughputExceededException', 'RequestLimitExceeded', 'ThrottlingException',
    'SlowDown', 'TooManyRequestsException', 'RequestThrottledException',
}
SERVICE_ERRORS = {
    'InternalServerError', 'ServiceUnavailable', 'ServiceUnavailableException', 'InternalFailure',
    'ServiceException', 'ServiceTimeout', 'RequestTimeoutException', 'RequestExpiredException',
}
AUTH_ERRORS = {
    'UnrecognizedClientException', 'AccessDeniedException', 'InvalidSignatureException',
    'IncompleteSignatureException', 'ExpiredTokenException', 'TokenRefreshRequiredException',
    'MissingAuthenticationTokenException', 'InvalidEndpointException',
}


def parse_cancellation_reasons(error: ClientError) -> List[str]:
    """Extract one reason code per transaction operation, in request order.

    botocore places ``CancellationReasons`` at the top of the response for the
    modeled exception; some endpoints only report them inside the message,
    e.g. ``"... [ConditionalCheckFailed, None]"``.
    """
    reasons = error.response.get('CancellationReasons') or error.response.get('Error', {}).get('CancellationReasons')
    if reasons:
        return [reason.get('Code') or 'None' for reason in reasons]

    message = error.response.get('Error', {}).get('Message', '')
    match = re.search(r'\[([^\]]*)\]\s*$', message)
    if match:
        return [code.strip() or 'None' for code in match.group(1).split(',')]
    return []


def map_dynamodb_error(
    error: ClientError,
    operation: str,
    table_name: str,
    resource_id: Optional[str] = None
) -> Exception:
    """Map DynamoDB ClientError to domain-specific exceptions.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetItem", "PutItem")
        table_name: The DynamoDB table name
        resource_id: Optional item identifier (``PK|SK``) for context

    Returns:
        - ConflictError for conditional check failures
        - TransactionAbortedError for cancelled or conflicting transactions
        - ValidationError for requests DynamoDB rejects as invalid
        - StorageUnavailableError for throttling, service, auth and missing-table faults
    """
    error_code = error.response['Error']['Code']
    error_message = error.response['Error'].get('Message', '')

    context = f"{operation} on {table_name}"
    if resource_id:
        context += f" (resource: {resource_id})"

    full_message = f"{context}: {error_message}"

    if error_code == 'ConditionalCheckFailedException':
        return ConflictError(f"Conditional check failed - {full_message}", resource_id, original_error=error)

    elif error_code == 'TransactionCanceledException':
        reasons = parse_cancellation_reasons(error)
        return TransactionAbortedError(f"Transaction cancelled - {full_message}", reasons, original_error=error)

    elif error_code in ['TransactionConflictException', 'TransactionInProgressException']:
        return TransactionAbortedError(
            f"Transaction conflict - {full_message}", ['TransactionConflict'], original_error=error
        )

    elif error_code in ['ValidationException', 'ItemCollectionSizeLimitExceededException',
                        'IdempotentParameterMismatchException']:
        return ValidationError(f"Request rejected - {full_message}", original_error=error)

    elif error_code in THROTTLING_ERRORS:
        return StorageUnavailableError(f"Throttling - {full_message}", retryable=True, original_error=error)

    elif error_code in SERVICE_ERRORS:
        return StorageUnavailableError(f"Service unavailable - {full_message}", retryable=True, original_error=error)

    elif error_code in ['ResourceNotFoundException', 'TableNotFoundException', 'IndexNotFoundException']:
        return StorageUnavailableError(f"Table not found - {full_message}", retryable=False, original_error=error)

    elif error_code in AUTH_ERRORS:
        return StorageUnavailableError(
            f"Authentication/authorization failed - {full_message}", retryable=False, original_error=error
        )

    logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to StorageUnavailableError")
    return StorageUnavailableError(f"DynamoDB operation failed - {full_message}", retryable=False, original_error=error)


def map_botocore_error(error: BotoCoreError, operation: str, table_name: str) -> StorageUnavailableError:
    """Map transport-level botocore failures (no HTTP response) to StorageUnavailableError."""
    retryable = not isinstance(error, NoCredentialsError)
    return StorageUnavailableError(f"{operation} on {table_name} failed: {error}", retryable=retryable, original_error=error)


def _resource_id(key_or_item: Dict[str, Any]) -> Optional[str]:
    pk = key_or_item.get(PARTITION_KEY)
    sk = key_or_item.get(SORT_KEY)
    if pk is None:
        return None
    return f"{pk}|{sk}"


class TableGateway:
    """
    Thin gateway for DynamoDB table operations.

    Provides minimal, composable DynamoDB operations without entity
    assumptions. Designed to be used by the read/write APIs rather than
    directly by clients.
    """

    def __init__(self, config: RecipeStoreConfig, table_name: str):
        """Initialize table gateway.

        Args:
            config: Recipe store configuration
            table_name: Full name of the DynamoDB table
        """
        self.config = config
        self.table_name = table_name
        self._dynamodb = None
        self._table = None

    @property
    def dynamodb(self):
        """Lazy initialization of DynamoDB resource."""
        if self._dynamodb is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    region_name=self.config.region_name
                )

                dynamodb_config = {
                    'region_name': self.config.region_name
                }

                if self.config.endpoint_url:
                    dynamodb_config['endpoint_url'] = self.config.endpoint_url

                boto_config = Config(
                    retries={'max_attempts': self.config.retries},
                    max_pool_connections=self.config.max_pool_connections,
                    read_timeout=self.config.timeout_seconds,
                    connect_timeout=self.config.timeout_seconds
                )
                dynamodb_config['config'] = boto_config

                self._dynamodb = session.resource('dynamodb', **dynamodb_config)
            except (BotoCoreError, ValueError) as e:
                logger.error(f"Failed to create DynamoDB resource: {e}")
                raise StorageUnavailableError(f"Failed to connect to DynamoDB: {e}", retryable=False, original_error=e) from e
        return self._dynamodb

    @property
    def table(self):
        """boto3 Table resource for the recipe table."""
        if self._table is None:
            self._table = self.dynamodb.Table(self.table_name)
        return self._table

    @property
    def client(self):
        """Low-level client sharing the resource's session (accepts Python types)."""
        return self.dynamodb.meta.client

    # -------------------------------------------------------------------------
    # Point operations
    # -------------------------------------------------------------------------

    def get_item(self, key: Dict[str, Any], consistent_read: Optional[bool] = None) -> Dict[str, Any]:
        """
        Read one item by primary key.

        Args:
            key: ``{'PK': ..., 'SK': ...}``
            consistent_read: Defaults to ``config.consistent_reads``

        Returns:
            Raw item

        Raises:
            ItemNotFoundError: If no item has this key
        """
        if consistent_read is None:
            consistent_read = self.config.consistent_reads
        try:
            response = self.table.get_item(Key=key, ConsistentRead=consistent_read)
        except ClientError as e:
            raise map_dynamodb_error(e, "GetItem", self.table_name, _resource_id(key)) from e
        except BotoCoreError as e:
            raise map_botocore_error(e, "GetItem", self.table_name) from e

        item = response.get('Item')
        if item is None:
            raise ItemNotFoundError(self.table_name, key)
        return item

    def put_item(
        self,
        item: Dict[str, Any],
        condition_expression=None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Put item into the table.

        Args:
            item: Item to store (must include ``PK`` and ``SK``)
            condition_expression: Optional condition, e.g. ``'attribute_not_exists(PK)'``

        Raises:
            ConflictError: If the condition fails
        """
        try:
            put_kwargs = {'Item': item}
            if condition_expression is not None:
                put_kwargs['ConditionExpression'] = condition_expression
            if expression_attribute_names:
                put_kwargs['ExpressionAttributeNames'] = expression_attribute_names
            if expression_attribute_values:
                put_kwargs['ExpressionAttributeValues'] = expression_attribute_values

            self.table.put_item(**put_kwargs)
            logger.info(f"Put item in {self.table_name}: {_resource_id(item)}")
        except ClientError as e:
            raise map_dynamodb_error(e, "PutItem", self.table_name, _resource_id(item)) from e
        except BotoCoreError as e:
            raise map_botocore_error(e, "PutItem", self.table_name) from e

    def update_item(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        condition_expression=None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Update item in the table.

        Args:
            key: Primary key of item to update
            update_expression: UPDATE expression
            expression_attribute_values: Values for update expression
            expression_attribute_names: Names for update expression
            condition_expression: Optional condition for update
            return_values: What to return after update

        Returns:
            Updated attributes if return_values != 'NONE'
        """
        try:
            update_kwargs = {
                'Key': key,
                'UpdateExpression': update_expression,
                'ReturnValues': return_values
            }

            if expression_attribute_values:
                update_kwargs['ExpressionAttributeValues'] = expression_attribute_values
            if expression_attribute_names:
                update_kwargs['ExpressionAttributeNames'] = expression_attribute_names
            if condition_expression is not None:
                update_kwargs['ConditionExpression'] = condition_expression

            response = self.table.update_item(**update_kwargs)
            logger.info(f"Updated item in {self.table_name}: {_resource_id(key)}")

            return response.get('Attributes') if return_values != 'NONE' else None

        except ClientError as e:
            raise map_dynamodb_error(e, "UpdateItem", self.table_name, _resource_id(key)) from e
        except BotoCoreError as e:
            raise map_botocore_error(e, "UpdateItem", self.table_name) from e

    def delete_item(
        self,
        key: Dict[str, Any],
        condition_expression=None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Delete item from the table.

        Without a condition the delete is idempotent: removing an absent key
        succeeds.

        Returns:
            Deleted attributes if return_values != 'NONE'
        """
        try:
            delete_kwargs = {
                'Key': key,
                'ReturnValues': return_values
            }

            if condition_expression is not None:
                delete_kwargs['ConditionExpression'] = condition_expression

            response = self.table.delete_item(**delete_kwargs)
            logger.info(f"Deleted item from {self.table_name}: {_resource_id(key)}")

            return response.get('Attributes') if return_values != 'NONE' else None

        except ClientError as e:
            raise map_dynamodb_error(e, "DeleteItem", self.table_name, _resource_id(key)) from e
        except BotoCoreError as e:
            raise map_botocore_error(e, "DeleteItem", self.table_name) from e

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def put_operation(
        self,
        item: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build a transactional Put on this table."""
        operation = {'TableName': self.table_name, 'Item': item}
        return {'Put': self._with_condition(operation, condition_expression,
                                            expression_attribute_names, expression_attribute_values)}

    def update_operation(
        self,
        key: Dict[str, Any],
        update_expression: str,
        condition_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build a transactional Update on this table."""
        operation = {'TableName': self.table_name, 'Key': key, 'UpdateExpression': update_expression}
        return {'Update': self._with_condition(operation, condition_expression,
                                               expression_attribute_names, expression_attribute_values)}

    def delete_operation(
        self,
        key: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build a transactional Delete on this table."""
        operation = {'TableName': self.table_name, 'Key': key}
        return {'Delete': self._with_condition(operation, condition_expression,
                                               expression_attribute_names, expression_attribute_values)}

    def condition_check_operation(
        self,
        key: Dict[str, Any],
        condition_expression: str,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Build a transactional ConditionCheck on this table."""
        operation = {'TableName': self.table_name, 'Key': key}
        return {'ConditionCheck': self._with_condition(operation, condition_expression,
                                                       expression_attribute_names, expression_attribute_values)}

    @staticmethod
    def _with_condition(operation, condition_expression, names, values) -> Dict[str, Any]:
        if condition_expression is not None:
            operation['ConditionExpression'] = condition_expression
        if names:
            operation['ExpressionAttributeNames'] = names
        if values:
            operation['ExpressionAttributeValues'] = values
        return operation

    def transact_write_items(self, transact_items: List[Dict[str, Any]]) -> None:
        """
        Execute transactional write operations: all of them or none.

        Args:
            transact_items: Operations built with ``put_operation``,
                ``update_operation``, ``delete_operation`` or
                ``condition_check_operation``

        Raises:
            ValidationError: If fewer than 2 or more than 100 operations are given
            TransactionAbortedError: If the transaction was cancelled; its
                ``cancellation_reasons`` line up with ``transact_items``

        Example:
            gateway.transact_write_items([
                gateway.update_operation(
                    recipe_key.as_dict(),
                    'SET likeCount = likeCount + :one',
                    condition_expression='attribute_exists(PK)',
                    expression_attribute_values={':one': 1}
                ),
                gateway.put_operation(like_item, 'attribute_not_exists(PK)'),
            ])
        """
        if not 2 <= len(transact_items) <= MAX_TRANSACTION_ITEMS:
            raise ValidationError(
                f"A transaction needs between 2 and {MAX_TRANSACTION_ITEMS} operations, got {len(transact_items)}",
                errors=[{'field': 'transact_items', 'message': 'invalid operation count', 'type': 'transaction_size'}]
            )

        try:
            self.client.transact_write_items(TransactItems=transact_items)
            logger.info(f"Transaction of {len(transact_items)} operations completed on {self.table_name}")
        except ClientError as e:
            error = map_dynamodb_error(e, "TransactWriteItems", self.table_name)
            logger.info(f"Transaction on {self.table_name} aborted: {error}")
            raise error from e
        except BotoCoreError as e:
            raise map_botocore_error(e, "TransactWriteItems", self.table_name) from e

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query(self, **kwargs) -> Dict[str, Any]:
        """
        Execute DynamoDB Query operation.

        Raw pass-through to boto3 with error handling.

        Args:
            **kwargs: All boto3 query parameters

        Returns:
            Raw DynamoDB response
        """
        try:
            return self.table.query(**kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "Query", self.table_name, kwargs.get('IndexName')) from e
        except BotoCoreError as e:
            raise map_botocore_error(e, "Query", self.table_name) from e

    def query_page(
        self,
        key_condition,
        index_name: Optional[str] = None,
        limit: Optional[int] = None,
        exclusive_start_key: Optional[Dict[str, Any]] = None,
        scan_index_forward: bool = True
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """
        Fetch one page of a query.

        Returns:
            Tuple of (items, last_evaluated_key); the key is None when the
            query is exhausted
        """
        if limit is not None and limit < 1:
            raise ValidationError(
                f"Page limit must be at least 1, got {limit}",
                errors=[{'field': 'limit', 'message': 'must be at least 1', 'type': 'greater_than_equal'}]
            )

        query_kwargs = {
            'KeyConditionExpression': key_condition,
            'ScanIndexForward': scan_index_forward,
        }
        if index_name:
            query_kwargs['IndexName'] = index_name
        if limit:
            query_kwargs['Limit'] = limit
        if exclusive_start_key:
            query_kwargs['ExclusiveStartKey'] = exclusive_start_key

        response = self.query(**query_kwargs)
        return response.get('Items', []), response.get('LastEvaluatedKey')

    def iter_query(
        self,
        key_condition,
        index_name: Optional[str] = None,
        page_size: Optional[int] = None,
        scan_index_forward: bool = True
    ) -> Iterator[Dict[str, Any]]:
        """
        Lazily yield every item matching a query, fetching pages on demand.

        Each call starts a fresh iteration from the first page.
        """
        last_key = None
        while True:
            items, last_key = self.query_page(
                key_condition,
                index_name=index_name,
                limit=page_size,
                exclusive_start_key=last_key,
                scan_index_forward=scan_index_forward,
            )
            yield from items
            if not last_key:
                return


def create_table_gateway(config: RecipeStoreConfig, table_name: Optional[str] = None) -> TableGateway:
    """
    Factory function to create a TableGateway instance.

    Args:
        config: Recipe store configuration
        table_name: Base table name (defaults to ``config.table_name``)

    Returns:
        Configured TableGateway instance
    """
    full_table_name = config.get_table_name(table_name)
    return TableGateway(config, full_table_name)
