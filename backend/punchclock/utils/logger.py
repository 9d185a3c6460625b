import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


async def log_event(
    action: str,
    details: Optional[Dict[str, Any]] = None,
    user_id: Optional[Any] = None,
    ip_address: Optional[str] = None
):
    """
    Log a business event to the application logger
    """
    log_message = f"Action: {action}"
    if user_id is not None:
        log_message += f" | User: {user_id}"
    if ip_address:
        log_message += f" | IP: {ip_address}"
    if details:
        log_message += f" | Details: {details}"

    logger.info(log_message)


def log_error(message: str, error: Exception, user_id: Optional[Any] = None):
    """
    Log an error with context
    """
    error_message = f"Error: {message} | Exception: {str(error)}"
    if user_id is not None:
        error_message += f" | User: {user_id}"

    logger.error(error_message)


# Event type constants for consistency
class EventTypes:
    AUTH_SUCCESS = "auth_success"
    AUTH_FAILED = "auth_failed"

    PUNCH_IN = "punch_in"
    PUNCH_OUT = "punch_out"

    OVERTIME_SUBMITTED = "overtime_submitted"
    OVERTIME_APPROVED = "overtime_approved"
    OVERTIME_REJECTED = "overtime_rejected"

    PASSWORD_SETUP_INITIATED = "password_setup_initiated"
    PASSWORD_SET = "password_set"

    EMPLOYEE_CREATED = "employee_created"
    EMPLOYEE_UPDATED = "employee_updated"
    EMPLOYEE_DELETED = "employee_deleted"

    EMAIL_FAILED = "email_failed"
    TOKEN_CLEANUP_COMPLETED = "token_cleanup_completed"
