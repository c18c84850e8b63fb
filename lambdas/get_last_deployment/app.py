# lambdas/get_last_deployment/app.py
import json

from lambdas.common.errors import DoraError
from lambdas.common.repositories.dynamodb_repository import create_new_dynamodb_repository
from lambdas.common.settings import get_settings
from lambdas.get_last_deployment.last_deployment import get_last_deployment
from lambdas.get_last_deployment.request_parser import get_request_dto


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


def handler(event: dict, context: object) -> dict:
    """
    API Gateway handler returning the commit ID and time of the last
    production deployment of a repository.
    """
    print(f"Received event: {json.dumps(event)}")
    allowed_origin = "*"

    try:
        settings = get_settings()
        allowed_origin = settings.allowed_origin
        request = get_request_dto((event or {}).get('queryStringParameters'), settings.max_date_range)
        repository = create_new_dynamodb_repository(settings)
        last_deployment = get_last_deployment(repository, request)
        return build_response(200, last_deployment, allowed_origin)

    except DoraError as e:
        print(f"Validation Error: {e}")
        return build_response(e.status_code, {'message': str(e)}, allowed_origin)

    except Exception as e:
        print(f"Internal Server Error: {e}")
        return build_response(500, {'message': 'An internal server error occurred.'}, allowed_origin)
