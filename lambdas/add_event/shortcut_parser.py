# lambdas/add_event/shortcut_parser.py
"""
Parser for Shortcut webhooks.

Shortcut sends a webhook per story change with a list of actions, e.g.:
{
  "primary_id": 10001,
  "changed_at": "2023-01-02T00:00:00.000Z",
  "actions": [
    {"id": 10001, "action": "update",
     "changes": {"label_ids": {"adds": [123], "removes": []}}}
  ]
}
The webhook does not carry the full story, so the story is fetched from the
Shortcut API. Stories tagged with the configured incident label are incidents,
everything else is a change.
"""
import json
from typing import Optional

import requests

from lambdas.common.errors import (
    MissingIdError,
    MissingShortcutFieldsError,
    ShortcutConfigurationError,
    ShortcutRequestError,
)
from lambdas.common.models import EventDto
from lambdas.common.settings import AppSettings, get_settings
from lambdas.common.time_utils import convert_date_to_unix_timestamp, get_current_timestamp

OPENED = "opened"
LABELED = "labeled"
CLOSED = "closed"
UNLABELED = "unlabeled"
UNKNOWN_EVENT = "unknown"

INCIDENT = "incident"
CHANGE = "change"


def has_label_id(check: str, label_id: int, actions: Optional[list]) -> bool:
    """
    Checks whether label_id is set on any action, either directly in its
    label_ids (new stories) or in the changes.label_ids[check] delta of an
    updated story. check is "adds" or "removes".
    """
    target = str(label_id)
    for action in actions or []:
        if not isinstance(action, dict):
            continue

        if any(str(label) == target for label in action.get('label_ids') or []):
            return True

        delta = (action.get('changes') or {}).get('label_ids') or {}
        if any(str(label) == target for label in delta.get(check) or []):
            return True

    return False


def _has_action(actions: list, kind: str) -> bool:
    return any(isinstance(a, dict) and a.get('action') == kind for a in actions)


class ShortcutParser:

    def __init__(self, settings: Optional[AppSettings] = None, session=None):
        settings = settings or get_settings()

        self.shortcut_token = settings.shortcut_token
        if not self.shortcut_token or self.shortcut_token == 'undefined':
            raise ShortcutConfigurationError('SHORTCUT_TOKEN')

        self.incident_label_id = settings.shortcut_incident_label_id
        if not self.incident_label_id:
            raise ShortcutConfigurationError('SHORTCUT_INCIDENT_LABEL_ID')

        self.api_url = settings.shortcut_api_url.rstrip('/')
        self.timeout = settings.request_timeout_seconds
        self.repo_name = settings.repo_name
        self.session = session or requests.Session()

    def get_story_data(self, body: dict) -> dict:
        """
        Fetches the story referenced by the webhook's primary_id.

        Raises:
            MissingIdError: If the webhook has no primary_id.
            ShortcutRequestError: If the Shortcut API call fails.
            MissingShortcutFieldsError: If the API returns no story data.
        """
        story_id = body.get('primary_id')
        if not story_id:
            raise MissingIdError("Missing ID in get_story_data()!")

        print(f"Fetching story {story_id} from Shortcut...")
        try:
            response = self.session.get(
                f"{self.api_url}/stories/{story_id}",
                headers={'Shortcut-Token': self.shortcut_token},
                timeout=self.timeout,
            )
            response.raise_for_status()
            story = response.json()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 502
            raise ShortcutRequestError(f"Shortcut API returned an error for story {story_id}: {e}", status_code)
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ShortcutRequestError(f"Could not fetch story {story_id} from Shortcut: {e}")

        if not story or not isinstance(story, dict):
            raise MissingShortcutFieldsError()
        return story

    def has_incident_label(self, actions: Optional[list]) -> bool:
        return has_label_id('adds', self.incident_label_id, actions)

    def story_has_incident_label(self, story: Optional[dict]) -> bool:
        """Checks the labels currently set on the story itself."""
        story = story or {}
        # Stories carry label_ids and also full label objects under labels
        label_ids = [label.get('id') for label in story.get('labels') or [] if isinstance(label, dict)]
        return has_label_id('adds', self.incident_label_id, [story, {'label_ids': label_ids}])

    def get_event_type(self, body: dict) -> str:
        """Shortcut uses labels to tell incidents apart from changes."""
        if not body:
            raise MissingShortcutFieldsError()

        if self.has_incident_label(body.get('actions')):
            return INCIDENT
        return CHANGE

    def classify(self, webhook: dict, story: dict) -> str:
        """Maps the webhook actions and story state to an event state."""
        if story.get('completed') is True or story.get('archived') is True:
            return CLOSED

        actions = webhook.get('actions') or []

        if _has_action(actions, 'create'):
            return LABELED if self.has_incident_label(actions) else OPENED

        if _has_action(actions, 'update'):
            if has_label_id('adds', self.incident_label_id, actions):
                return LABELED
            if has_label_id('removes', self.incident_label_id, actions):
                return UNLABELED
            return OPENED

        return UNKNOWN_EVENT

    def get_payload(self, body: dict) -> tuple[str, EventDto]:
        """
        Builds the normalized event for a webhook.

        Returns:
            A tuple of the event state (opened/labeled/closed/unlabeled/unknown)
            and its EventDto.
        """
        if not body:
            raise MissingShortcutFieldsError()

        story = self.get_story_data(body)
        event = self.classify(body, story)
        print(f"Story {story.get('id')} classified as '{event}'.")

        if event in (OPENED, LABELED):
            return event, self._build_dto(body, story)
        if event in (CLOSED, UNLABELED):
            return event, self._build_dto(body, story, time_resolved=self._get_time_resolved(story))
        return event, EventDto.unknown()

    def get_repo_name(self, body: dict) -> str:
        return self.repo_name

    @staticmethod
    def _build_dto(webhook: dict, story: dict, time_resolved: str = None) -> EventDto:
        changed_at = webhook.get('changed_at')
        return EventDto(
            event_time=convert_date_to_unix_timestamp(changed_at) if changed_at else get_current_timestamp(),
            time_created=convert_date_to_unix_timestamp(story.get('created_at')),
            time_resolved=time_resolved,
            id=str(story.get('id')),
            title=story.get('name') or "",
            message=json.dumps(story),
        )

    @staticmethod
    def _get_time_resolved(story: dict) -> str:
        resolved_at = story.get('completed_at_override') or story.get('completed_at')
        if (story.get('completed') or story.get('archived')) and resolved_at:
            return convert_date_to_unix_timestamp(resolved_at)
        return get_current_timestamp()
