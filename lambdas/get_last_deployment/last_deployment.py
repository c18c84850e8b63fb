# lambdas/get_last_deployment/last_deployment.py
from lambdas.common.models import DataRequest, RequestDto


def get_last_deployment(repository, request: RequestDto) -> dict:
    """
    Finds the most recent deployment of a repository within the requested range.

    Returns:
        {"id": ..., "timeCreated": ...} for the latest deployment, or {} if there is none.
    """
    deployments = repository.get_metrics(DataRequest(
        key=f"DEPLOYMENT_{request.repo}",
        from_time=request.from_time,
        to_time=request.to_time,
        offset=request.offset,
    ))
    if not deployments:
        print(f"No deployments found for '{request.repo}'.")
        return {}

    latest = max(deployments, key=lambda d: int(d.time_created))
    return {'id': latest.id, 'timeCreated': latest.time_created}
