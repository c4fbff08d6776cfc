"""
Review workflow for safety articles.

    draft --submit--> pending_review --approve--> approved --publish--> published
    pending_review --reject--> rejected --re_review--> pending_review
    published --unpublish--> draft
    pending_review --cancel_pending--> draft

``next_status`` is the only place that knows which transitions are legal;
callers persist the result.
"""

DRAFT = 'draft'
PENDING_REVIEW = 'pending_review'
APPROVED = 'approved'
PUBLISHED = 'published'
REJECTED = 'rejected'

STATUS_CHOICES = (
    (DRAFT, 'Draft'),
    (PENDING_REVIEW, 'Pending Review'),
    (APPROVED, 'Approved'),
    (PUBLISHED, 'Published'),
    (REJECTED, 'Rejected'),
)

# action -> (allowed source status, target status, message when the source does not match)
TRANSITIONS = {
    'submit': (DRAFT, PENDING_REVIEW, 'Article is not in draft status'),
    'approve': (PENDING_REVIEW, APPROVED, 'Article is not pending review'),
    'reject': (PENDING_REVIEW, REJECTED, 'Article is not pending review'),
    'publish': (APPROVED, PUBLISHED, 'Article is not approved'),
    'unpublish': (PUBLISHED, DRAFT, 'Article is not published'),
    're_review': (REJECTED, PENDING_REVIEW, 'Only rejected articles can be sent back for review'),
    'cancel_pending': (PENDING_REVIEW, DRAFT, 'Article is not in pending review status'),
}

REVIEW_ACTIONS = ('approve', 'reject')


class InvalidTransition(Exception):
    """Raised when an action is not allowed from the article's current status."""

    def __init__(self, message, action=None, status=None):
        super().__init__(message)
        self.action = action
        self.status = status


def next_status(current, action):
    """Return the status ``action`` leads to from ``current``."""
    try:
        source, target, message = TRANSITIONS[action]
    except KeyError:
        raise InvalidTransition('Invalid action', action=action, status=current)
    if current != source:
        raise InvalidTransition(message, action=action, status=current)
    return target


def author_can_modify(status):
    """Authors may edit or delete anything that is not live."""
    return status != PUBLISHED
