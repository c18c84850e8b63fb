# lambdas/get_last_deployment/request_parser.py
from lambdas.common.errors import (
    InvalidDateOrderError,
    InvalidOffsetError,
    MissingRepoNameError,
    OutOfRangeQueryError,
    TooManyInputParamsError,
)
from lambdas.common.models import RequestDto
from lambdas.common.time_utils import (
    get_date_before,
    get_max_timestamp_from_date,
    get_timestamp_for_input_date,
    get_timestamps_for_period,
)


def _parse_offset(value) -> int:
    try:
        offset = int(value)
    except (TypeError, ValueError):
        raise InvalidOffsetError()
    if offset < -12 or offset > 12:
        raise InvalidOffsetError()
    return offset


def get_request_dto(query_params: dict | None, max_date_range: int) -> RequestDto:
    """
    Parses and validates the query string of a read request.

    Accepted parameters:
        repo: Required product name.
        from, to: Dates in YYYYMMDD format. A missing "to" means today.
        last: Number of days before today; cannot be combined with from/to.
        offset: Timezone offset in hours, -12 to 12.
    Without any date parameters the full allowed range up to today is used.

    Raises:
        DoraError subclasses if validation fails.
    """
    query_params = query_params or {}

    repo = query_params.get('repo')
    if not repo:
        raise MissingRepoNameError()

    offset = _parse_offset(query_params.get('offset', 0))
    from_date = query_params.get('from')
    to_date = query_params.get('to')
    last = query_params.get('last')

    if last and (from_date or to_date):
        raise TooManyInputParamsError()

    max_timestamp = get_max_timestamp_from_date(max_date_range, offset)

    if last:
        try:
            last_num_days = int(last)
        except ValueError:
            raise OutOfRangeQueryError("Invalid query parameter: last must be an integer.")
        if last_num_days < 1 or last_num_days > max_date_range:
            raise OutOfRangeQueryError()
        period = get_timestamps_for_period(last_num_days, offset)
        from_time, to_time = period['from'], period['to']
    else:
        today = get_date_before(False)
        from_time = get_timestamp_for_input_date(from_date, offset) if from_date else max_timestamp
        to_time = get_timestamp_for_input_date(to_date or today, offset, True)

    if int(from_time) > int(to_time):
        raise InvalidDateOrderError()
    if int(from_time) < int(max_timestamp):
        raise OutOfRangeQueryError()

    return RequestDto(repo=repo, from_time=from_time, to_time=to_time, offset=offset)
