"""
Boundary validation for recommendation requests
"""
import math

from app.services.recommendations.exceptions import ContextValidationError
from app.services.recommendations.models import RecommendationContext, RecommendationOptions
from app.services.recommendations.parsers import parse_datetime


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_context(context: RecommendationContext) -> None:
    """
    Reject contexts that indicate caller misuse

    Args:
        context: Recommendation context

    Raises:
        ContextValidationError: On the first invalid field
    """
    if not context.user_id or not str(context.user_id).strip():
        raise ContextValidationError("user_id", "must be a non-empty string")

    location = context.current_location
    if location is not None:
        if not _is_number(location.lat) or not -90.0 <= location.lat <= 90.0:
            raise ContextValidationError("current_location.lat", "must be within [-90, 90]")
        if not _is_number(location.lng) or not -180.0 <= location.lng <= 180.0:
            raise ContextValidationError("current_location.lng", "must be within [-180, 180]")

    budget = context.budget
    if budget is not None:
        if not _is_number(budget.min) or not _is_number(budget.max):
            raise ContextValidationError("budget", "min and max must be finite numbers")
        if budget.min < 0:
            raise ContextValidationError("budget.min", "must not be negative")
        if budget.min > budget.max:
            raise ContextValidationError("budget", "min must not exceed max")
        if not budget.currency:
            raise ContextValidationError("budget.currency", "must be set")

    dates = context.travel_dates
    if dates is not None:
        start, end = parse_datetime(dates.start), parse_datetime(dates.end)
        if start is None or end is None:
            raise ContextValidationError("travel_dates", "start and end must be datetimes")
        if end < start:
            raise ContextValidationError("travel_dates", "end must not be before start")

    if context.group_size is not None and context.group_size < 1:
        raise ContextValidationError("group_size", "must be at least 1")


def validate_options(options: RecommendationOptions) -> None:
    """
    Reject out-of-range tuning options

    Args:
        options: Recommendation options

    Raises:
        ContextValidationError: On the first invalid field
    """
    if options.max_results < 1:
        raise ContextValidationError("max_results", "must be at least 1")
    if not 0.0 <= options.min_score <= 1.0:
        raise ContextValidationError("min_score", "must be within [0, 1]")
    if not 0.0 <= options.diversity_factor <= 1.0:
        raise ContextValidationError("diversity_factor", "must be within [0, 1]")
    if options.geographic_radius_meters <= 0:
        raise ContextValidationError("geographic_radius_meters", "must be positive")
