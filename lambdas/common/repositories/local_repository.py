# lambdas/common/repositories/local_repository.py
"""
In-memory repository used for tests and local runs. Without explicit test data
it loads the bundled test database from test_database.yml.
"""
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from lambdas.common.models import Change, DataRequest, Deployment, Event, Incident

TEST_DATABASE_PATH = Path(__file__).parent / "test_database.yml"


def load_test_database(path: Path = TEST_DATABASE_PATH) -> dict:
    with open(path, 'r') as f:
        data = yaml.safe_load(f) or {}
    return {
        'changes': [Change(**item) for item in data.get('changes', [])],
        'deployments': [Deployment(**item) for item in data.get('deployments', [])],
        'incidents': [Incident(**item) for item in data.get('incidents', [])],
    }


def create_new_local_repository(test_data: Optional[dict] = None) -> "LocalRepository":
    return LocalRepository(test_data)


def _split_key(key: str) -> tuple[str, str]:
    kind, _, product = key.partition('_')
    return kind.upper(), product


class LocalRepository:
    """
    A simple stand-in for the DynamoDB repository. Each collection may be
    overridden through test_data; missing ones fall back to the test database.
    """

    def __init__(self, test_data: Optional[dict] = None):
        test_data = test_data or {}
        defaults = {}
        if not all(k in test_data for k in ('changes', 'deployments', 'incidents')):
            defaults = load_test_database()

        self.changes: List[Change] = list(test_data.get('changes', defaults.get('changes', [])))
        self.deployments: List[Deployment] = list(test_data.get('deployments', defaults.get('deployments', [])))
        self.incidents: List[Incident] = list(test_data.get('incidents', defaults.get('incidents', [])))
        self.events: List[Event] = []
        self._cache: Dict[tuple, list] = {}

    def get_metrics(self, data_request: DataRequest) -> list:
        """Gets the items for a "<KIND>_<product>" key, within from/to when given."""
        cache_key = _split_key(data_request.key)
        if cache_key in self._cache:
            print(f"Returning cached data for '{data_request.key}'...")
            items = self._cache[cache_key]
        else:
            items = self._get_items(*cache_key)
            self._cache[cache_key] = items

        return [item for item in items if self._in_range(item, data_request)]

    def _get_items(self, kind: str, product: str) -> list:
        collection = {
            'CHANGE': self.changes,
            'DEPLOYMENT': self.deployments,
            'INCIDENT': self.incidents,
        }.get(kind)

        if collection is None:
            return []
        return [item for item in collection if item.product == product]

    @staticmethod
    def _in_range(item, data_request: DataRequest) -> bool:
        created = int(item.time_created)
        if data_request.from_time and created < int(data_request.from_time):
            return False
        if data_request.to_time and created > int(data_request.to_time):
            return False
        return True

    def _upsert(self, kind: str, collection: list, item) -> list:
        # Same product and id replaces the stored item.
        self._cache.pop((kind, item.product), None)
        kept = [i for i in collection if not (i.product == item.product and i.id == item.id)]
        kept.append(item)
        return kept

    def add_event(self, event: Event):
        print(f"Added event item: {event.id} ({event.event_type}/{event.status})")
        self.events.append(event)

    def add_change(self, change: Change):
        print(f"Added change item: {change.id}")
        self.changes = self._upsert('CHANGE', self.changes, change)

    def add_deployment(self, deployment: Deployment):
        print(f"Added deployment item: {deployment.id}")
        self.deployments = self._upsert('DEPLOYMENT', self.deployments, deployment)

    def add_incident(self, incident: Incident):
        print(f"Added incident item: {incident.id}")
        self.incidents = self._upsert('INCIDENT', self.incidents, incident)
