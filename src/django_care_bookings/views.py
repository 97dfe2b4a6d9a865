"""JSON API views for booking submissions, status changes and amendments."""

import json
import logging

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .amendments import approve_amendment, reject_amendment
from .changes import parse_changes
from .exceptions import (
    AmendmentAlreadyResolvedError,
    AmendmentNotFoundError,
    InvalidStatusError,
    MalformedStatusError,
    QaBatchWriteError,
)
from .models import Booking
from .reconciler import reconcile_submission
from .status_changes import change_eligibility, change_status
from .statuses import StatusValue

logger = logging.getLogger(__name__)


def _actor(request):
    user = getattr(request, "user", None)
    return user if user is not None and user.is_authenticated else None


def _json_body(request) -> dict:
    body = json.loads(request.body or b"{}")
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


@csrf_exempt
@require_POST
def save_qa_pairs(request, uuid):
    """API: Save a batch of answers and reconcile the booking."""
    booking = get_object_or_404(Booking, uuid=uuid)

    try:
        body = _json_body(request)
        changes = parse_changes(body.get("qa_pairs"))
    except (ValueError, TypeError) as e:
        return JsonResponse({"success": False, "error": str(e)}, status=400)

    try:
        result = reconcile_submission(
            booking,
            changes,
            flags=body.get("flags") or {},
            equipment_changes=body.get("equipmentChanges") or [],
            actor=_actor(request),
        )
    except QaBatchWriteError as e:
        return JsonResponse({"success": False, "error": str(e)}, status=500)

    return JsonResponse({"success": True, "bookingAmended": result.amended})


@csrf_exempt
@require_POST
def update_status(request, uuid):
    """API: Change a booking's status or eligibility."""
    booking = get_object_or_404(Booking, uuid=uuid)

    try:
        body = _json_body(request)
        status = body.get("status")
        eligibility = body.get("eligibility")
        if bool(status) == bool(eligibility):
            return JsonResponse(
                {"error": "Validation error", "message": "Provide exactly one of status or eligibility"},
                status=400,
            )

        if eligibility:
            change_eligibility(booking, StatusValue.from_json(eligibility), actor=_actor(request))
        else:
            change_status(booking, StatusValue.from_json(status), actor=_actor(request))
    except (ValueError, InvalidStatusError, MalformedStatusError) as e:
        return JsonResponse({"error": "Validation error", "message": str(e)}, status=400)

    return JsonResponse({"success": True, "message": "Booking status updated successfully"})


@csrf_exempt
@require_POST
def resolve_amendment(request):
    """API: Approve (``approved: true``) or reject an amendment log."""
    try:
        body = _json_body(request)
    except ValueError as e:
        return JsonResponse({"message": str(e)}, status=400)

    log_id = body.pop("id", None)
    if log_id is None:
        return JsonResponse({"message": "Log id is required"}, status=400)
    try:
        log_id = int(log_id)
    except (TypeError, ValueError):
        return JsonResponse({"message": "Log id must be an integer"}, status=400)

    try:
        if body.get("approved"):
            approve_amendment(log_id, body, actor=_actor(request))
            return JsonResponse({"message": "Log updated successfully"})

        reject_amendment(log_id, actor=_actor(request))
        return JsonResponse({"message": "Answer to the question reverted due to declining of changes."})
    except AmendmentNotFoundError:
        return JsonResponse({"message": "Log not found"}, status=404)
    except AmendmentAlreadyResolvedError as e:
        return JsonResponse({"message": str(e)}, status=400)
