# lambdas/common/repositories/dynamodb_repository.py
"""
DynamoDB-backed repository. A single table holds every collection:
  pk = "<KIND>_<product>" (e.g. "INCIDENT_eHawk"), sk = item id.
Events are append-only and use "<id>#<eventTime>" as their sort key.
"""
from typing import Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from lambdas.common.models import Change, DataRequest, Deployment, Event, Incident
from lambdas.common.settings import AppSettings, get_settings

MODELS_BY_KIND = {
    'CHANGE': Change,
    'DEPLOYMENT': Deployment,
    'INCIDENT': Incident,
}


def create_new_dynamodb_repository(settings: Optional[AppSettings] = None) -> "DynamoDbRepository":
    settings = settings or get_settings()
    dynamodb = boto3.resource('dynamodb', region_name=settings.aws_region)
    return DynamoDbRepository(dynamodb.Table(settings.table_name))


class DynamoDbRepository:

    def __init__(self, table):
        self.table = table

    def get_metrics(self, data_request: DataRequest) -> list:
        """
        Queries all items under a "<KIND>_<product>" key, optionally limited
        to items whose timeCreated falls within from/to.

        Returns:
            A list of Change, Deployment or Incident models; empty for unknown kinds.
        """
        kind, _, product = data_request.key.partition('_')
        model = MODELS_BY_KIND.get(kind.upper())
        if model is None:
            return []

        query_args = {'KeyConditionExpression': Key('pk').eq(f"{kind.upper()}_{product}")}
        # Each bound applies on its own
        filter_expression = None
        if data_request.from_time:
            filter_expression = Attr('timeCreated').gte(data_request.from_time)
        if data_request.to_time:
            upper = Attr('timeCreated').lte(data_request.to_time)
            filter_expression = upper if filter_expression is None else filter_expression & upper
        if filter_expression is not None:
            query_args['FilterExpression'] = filter_expression

        return [model(**item) for item in self._query_all(query_args)]

    def _query_all(self, query_args: dict) -> list:
        items = []
        try:
            response = self.table.query(**query_args)
            items.extend(response.get('Items', []))
            # Keep paging until DynamoDB stops returning a continuation key
            while 'LastEvaluatedKey' in response:
                response = self.table.query(ExclusiveStartKey=response['LastEvaluatedKey'], **query_args)
                items.extend(response.get('Items', []))
        except ClientError as e:
            print(f"❌ Error querying DynamoDB: {e.response['Error']['Message']}")
            raise
        return items

    def _put(self, pk: str, sk: str, item: dict):
        try:
            self.table.put_item(Item={'pk': pk, 'sk': sk, **item})
        except ClientError as e:
            print(f"❌ Error saving '{pk}' to DynamoDB: {e.response['Error']['Message']}")
            raise

    def add_event(self, event: Event):
        self._put(f"EVENT_{event.product}", f"{event.id}#{event.event_time}", event.to_dict())
        print(f"✅ Added event item: {event.id} ({event.event_type}/{event.status})")

    def add_change(self, change: Change):
        self._put(f"CHANGE_{change.product}", change.id, change.to_dict())
        print(f"✅ Added change item: {change.id}")

    def add_deployment(self, deployment: Deployment):
        self._put(f"DEPLOYMENT_{deployment.product}", deployment.id, deployment.to_dict())
        print(f"✅ Added deployment item: {deployment.id}")

    def add_incident(self, incident: Incident):
        self._put(f"INCIDENT_{incident.product}", incident.id, incident.to_dict())
        print(f"✅ Added incident item: {incident.id}")
