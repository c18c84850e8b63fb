# run_live.py
import json
import boto3
from botocore.exceptions import ClientError

# Import the main handler function and settings
from lambdas.add_event.app import handler
from lambdas.common.settings import get_settings
from cli.push_webhook import create_webhook_payload


def setup_dynamodb_table(dynamodb=None):
    """Checks for and creates the events table if it doesn't exist."""
    settings = get_settings()
    dynamodb = dynamodb or boto3.resource('dynamodb', region_name=settings.aws_region)
    table_name = settings.table_name

    try:
        dynamodb.meta.client.describe_table(TableName=table_name)
        print(f"DynamoDB table '{table_name}' already exists.")
    except ClientError as e:
        if e.response['Error']['Code'] != 'ResourceNotFoundException':
            raise
        print(f"DynamoDB table '{table_name}' not found. Creating it now...")
        dynamodb.create_table(
            TableName=table_name,
            KeySchema=[
                {'AttributeName': 'pk', 'KeyType': 'HASH'},
                {'AttributeName': 'sk', 'KeyType': 'RANGE'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'pk', 'AttributeType': 'S'},
                {'AttributeName': 'sk', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )
        dynamodb.Table(table_name).wait_until_exists()
        print(f"Table '{table_name}' created successfully.")


def run(story_id: int):
    settings = get_settings()
    webhook = create_webhook_payload(story_id, "update", label_adds=[settings.shortcut_incident_label_id])
    response = handler({'body': json.dumps(webhook)}, None)
    print(json.dumps(response, indent=2))
    return response


if __name__ == "__main__":
    import sys

    setup_dynamodb_table()
    run(int(sys.argv[1]) if len(sys.argv) > 1 else 1)
