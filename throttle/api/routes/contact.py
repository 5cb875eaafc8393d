"""Public contact-form endpoint, guarded by the strict contact-form policy."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, status

from throttle.core.policies import CONTACT_FORM
from throttle.core.rate_limit import rate_limited
from throttle.schemas.contact import ContactResponse, ContactSubmission

logger = logging.getLogger(__name__)

# Every route on this router counts against the contact-form window,
# including submissions that later fail validation.
router = APIRouter(tags=["Contact"], dependencies=[Depends(rate_limited(CONTACT_FORM))])


@router.post("/contact", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(payload: ContactSubmission) -> ContactResponse:
    """Accept a contact form submission.

    Storage and notification belong to downstream services; this endpoint
    validates the payload and acknowledges it with an id.
    """
    submission_id = uuid.uuid4().hex
    logger.info(
        "contact.submitted",
        extra={
            "submission_id": submission_id,
            "subject_chars": len(payload.subject),
            "message_chars": len(payload.message),
        },
    )
    return ContactResponse(id=submission_id)
