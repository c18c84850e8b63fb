import os
import json
from datetime import datetime, timezone

import requests
from dotenv import load_dotenv

# Load environment variables from a .env file for local testing
load_dotenv()

# Get the API Gateway endpoint URL from an environment variable
API_ENDPOINT = os.environ.get("WEBHOOK_API")


def create_webhook_payload(story_id: int, action: str = "update", label_adds=None, label_removes=None) -> dict:
    """
    Creates a Shortcut-style webhook payload for a single story action.
    """
    story_action = {"id": story_id, "entity_type": "story", "action": action}

    if action == "create":
        story_action["label_ids"] = list(label_adds or [])
    elif label_adds or label_removes:
        story_action["changes"] = {
            "label_ids": {"adds": list(label_adds or []), "removes": list(label_removes or [])}
        }

    return {
        "id": f"webhook-{story_id}-{int(datetime.now(timezone.utc).timestamp())}",
        "primary_id": story_id,
        "changed_at": datetime.now(timezone.utc).isoformat(),
        "version": "v1",
        "actions": [story_action],
    }


def send_webhook_to_api(payload: dict):
    """
    Posts a webhook payload to the add-event API.
    """
    if not API_ENDPOINT:
        print("❌ ERROR: WEBHOOK_API environment variable not set. Please create a .env file.")
        return

    print("--- Attempting to send webhook ---")
    print(json.dumps(payload, indent=2))
    print("----------------------------------")

    try:
        response = requests.post(API_ENDPOINT, json=payload, timeout=10)
        response.raise_for_status()
        print("\n✅ Success! Webhook sent.")
        print(f"Status Code: {response.status_code}")
        print(f"Response Body: {response.json()}")

    except requests.exceptions.RequestException as e:
        print("\n❌ Failed to send webhook.")
        print(f"Error: {e}")


if __name__ == "__main__":
    print("--- Shortcut Webhook Test CLI ---")

    story_id = int(os.environ.get("STORY_ID", "1"))
    label_id = int(os.environ.get("SHORTCUT_INCIDENT_LABEL_ID", "0"))

    # Tag the story as an incident
    send_webhook_to_api(create_webhook_payload(story_id, "update", label_adds=[label_id]))
