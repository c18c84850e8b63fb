# lambdas/add_event/app.py
import base64
import binascii
import json

from lambdas.add_event.shortcut_parser import CLOSED, INCIDENT, UNKNOWN_EVENT, UNLABELED, ShortcutParser
from lambdas.common.errors import DoraError, MissingShortcutFieldsError
from lambdas.common.models import Change, Event, EventDto, Incident
from lambdas.common.repositories.dynamodb_repository import create_new_dynamodb_repository
from lambdas.common.settings import get_settings


def build_response(status_code: int, body, allowed_origin: str = "*") -> dict:
    """Helper function to build the API Gateway proxy response."""
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json',
            'Access-Control-Allow-Origin': allowed_origin
        },
        'body': json.dumps(body)
    }


def parse_webhook_body(event: dict) -> dict:
    """Decodes the webhook JSON from an API Gateway proxy event."""
    body = (event or {}).get('body')
    if not body:
        raise MissingShortcutFieldsError()
    if isinstance(body, dict):
        return body

    try:
        if event.get('isBase64Encoded'):
            body = base64.b64decode(body, validate=True).decode('utf-8')
        parsed = json.loads(body)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError):
        raise MissingShortcutFieldsError("Webhook body is not valid JSON.")

    if not isinstance(parsed, dict):
        raise MissingShortcutFieldsError()
    return parsed


def add_event(repository, parser: ShortcutParser, webhook: dict) -> Event | None:
    """
    Classifies a webhook and stores it as an event, plus an incident or a
    change. Unknown events are not stored.

    Returns:
        The stored Event, or None for unknown events.
    """
    event_type = parser.get_event_type(webhook)
    status, dto = parser.get_payload(webhook)

    if status == UNKNOWN_EVENT:
        print("⚠️ Webhook did not map to a known event. Nothing stored.")
        return None

    # Removing the incident label, or closing a story that still carries it,
    # resolves the incident.
    if status == UNLABELED:
        event_type = INCIDENT
    elif status == CLOSED and parser.story_has_incident_label(json.loads(dto.message)):
        event_type = INCIDENT

    product = parser.get_repo_name(webhook)
    event = Event(product=product, event_type=event_type, status=status, **dto.model_dump())
    repository.add_event(event)

    if event_type == INCIDENT:
        repository.add_incident(Incident(
            product=product,
            id=dto.id,
            event_time=dto.event_time,
            time_created=dto.time_created,
            time_resolved=dto.time_resolved,
            title=dto.title,
        ))
    else:
        repository.add_change(Change(
            product=product,
            id=dto.id,
            event_time=dto.event_time,
            time_created=dto.time_created,
            time_resolved=dto.time_resolved,
        ))
    return event


def handler(event: dict, context: object) -> dict:
    """
    API Gateway handler receiving Shortcut webhooks. Parses the webhook,
    classifies it and persists the normalized event.
    """
    print("--- AddEvent Lambda Triggered ---")
    allowed_origin = "*"

    try:
        settings = get_settings()
        allowed_origin = settings.allowed_origin

        webhook = parse_webhook_body(event)
        print(f"Received webhook: {json.dumps(webhook)}")

        parser = ShortcutParser(settings)
        repository = create_new_dynamodb_repository(settings)
        stored = add_event(repository, parser, webhook)

        if stored is None:
            return build_response(200, EventDto.unknown().to_dict(), allowed_origin)
        return build_response(200, stored.to_dict(), allowed_origin)

    except DoraError as e:
        print(f"⚠️ Request failed ({e.status_code}): {e}")
        return build_response(e.status_code, {'message': str(e)}, allowed_origin)

    except Exception as e:
        print(f"❌ An unexpected error occurred while adding the event: {e}")
        return build_response(500, {'message': 'An internal server error occurred.'}, allowed_origin)
