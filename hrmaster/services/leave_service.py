"""
Leave engine: balances per (user, year), submission with balance check,
approval and rejection.
"""
import logging
from datetime import date, datetime
from typing import Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from hrmaster.core.constants import LEAVE_TYPE_BUCKETS, LEAVE_TYPES
from hrmaster.core.errors import (
    AlreadyProcessed, InsufficientBalance, InvalidRange, ValidationFailed,
)
from hrmaster.core.ids import get_or_404
from hrmaster.core.timezone_utils import day_start
from hrmaster.models.leave import BalanceBucket, Leave, LeaveBalance
from hrmaster.models.users import User
from hrmaster.services import calendar_service
from hrmaster.services.notification_service import NotificationService
from hrmaster.services.permission import PermissionService

logger = logging.getLogger(__name__)


def count_days(start: date, end: date) -> int:
    """Inclusive number of calendar days from start to end."""
    return (day_start(end) - day_start(start)).days + 1


class LeaveService:
    @staticmethod
    async def get_or_create_balance(user_id: str, year: int) -> LeaveBalance:
        balance = await LeaveBalance.find_one({"user_id": str(user_id), "year": year})
        if balance:
            return balance

        defaults = await calendar_service.get_system_settings()
        balance = LeaveBalance(
            user_id=str(user_id),
            year=year,
            sick_leave=BalanceBucket(total=defaults.default_sick_leave),
            vacation=BalanceBucket(total=defaults.default_vacation_leave),
            personal_leave=BalanceBucket(total=defaults.default_personal_leave),
        )
        try:
            await balance.insert()
        except DuplicateKeyError:
            # created by a concurrent request
            balance = await LeaveBalance.find_one({"user_id": str(user_id), "year": year})
        return balance

    @staticmethod
    async def list_requests(user: User) -> List[Leave]:
        query: Dict = {} if PermissionService.is_privileged(user) else {"user_id": str(user.id)}
        return await Leave.find(query).sort("-applied_on").to_list()

    @staticmethod
    async def submit(
        user: User,
        type: Optional[str],
        start_date: Optional[date],
        end_date: Optional[date],
        reason: Optional[str],
    ) -> Leave:
        if not type or not start_date or not end_date or not reason or not reason.strip():
            raise ValidationFailed("All fields are required")
        if type not in LEAVE_TYPES:
            raise ValidationFailed("Invalid leave type")

        days = count_days(start_date, end_date)
        if days <= 0:
            raise InvalidRange()

        bucket_name = LEAVE_TYPE_BUCKETS.get(type)
        if bucket_name:
            balance = await LeaveService.get_or_create_balance(str(user.id), start_date.year)
            bucket: BalanceBucket = getattr(balance, bucket_name)
            if days > bucket.available:
                raise InsufficientBalance(
                    f"Insufficient leave balance. You have {bucket.available} days available."
                )

        leave = Leave(
            user_id=str(user.id),
            type=type,
            start_date=day_start(start_date),
            end_date=day_start(end_date),
            days=days,
            reason=reason.strip(),
        )
        await leave.insert()

        await NotificationService.notify_privileged(
            type="leave",
            title="New Leave Request",
            message=f"{user.full_name} has requested {days} day(s) of {type}",
            related_user=str(user.id),
            related_id=str(leave.id),
        )
        return leave

    @staticmethod
    async def approve(approver: User, leave_id: str) -> Leave:
        PermissionService.ensure_privileged(approver)
        leave = await get_or_404(Leave, leave_id, "Leave request not found")
        if leave.status != "pending":
            raise AlreadyProcessed()

        leave.status = "approved"
        leave.approved_by = str(approver.id)
        leave.approval_date = datetime.utcnow()
        leave.updated_at = datetime.utcnow()
        await leave.save()

        bucket_name = LEAVE_TYPE_BUCKETS.get(leave.type)
        if bucket_name:
            balance = await LeaveService.get_or_create_balance(leave.user_id, leave.start_date.year)
            await balance.inc({f"{bucket_name}.used": leave.days})
        logger.info("Leave %s approved by %s (%d days %s)", leave.id, approver.id, leave.days, leave.type)

        await NotificationService.notify(
            leave.user_id,
            type="approval",
            title="Leave Request Approved",
            message=(
                f"Your {leave.type} request from {leave.start_date.strftime('%b %d, %Y')} "
                f"to {leave.end_date.strftime('%b %d, %Y')} has been approved."
            ),
            actor=str(approver.id),
            related_id=str(leave.id),
        )
        return leave

    @staticmethod
    async def reject(approver: User, leave_id: str, reason: Optional[str] = None) -> Leave:
        PermissionService.ensure_privileged(approver)
        leave = await get_or_404(Leave, leave_id, "Leave request not found")
        if leave.status != "pending":
            raise AlreadyProcessed()

        leave.status = "rejected"
        leave.rejected_by = str(approver.id)
        leave.rejection_reason = (reason or "").strip() or "No reason provided"
        leave.updated_at = datetime.utcnow()
        await leave.save()
        logger.info("Leave %s rejected by %s", leave.id, approver.id)

        await NotificationService.notify(
            leave.user_id,
            type="alert",
            title="Leave Request Rejected",
            message=f"Your {leave.type} request has been rejected. Reason: {leave.rejection_reason}",
            actor=str(approver.id),
            related_id=str(leave.id),
        )
        return leave

    @staticmethod
    async def apply_defaults(year: int) -> int:
        """Reset every bucket total for `year` to the current defaults, keeping `used`."""
        defaults = await calendar_service.get_system_settings()
        result = await LeaveBalance.find({"year": year}).update(
            {
                "$set": {
                    "sick_leave.total": defaults.default_sick_leave,
                    "vacation.total": defaults.default_vacation_leave,
                    "personal_leave.total": defaults.default_personal_leave,
                    "updated_at": datetime.utcnow(),
                }
            }
        )
        modified = getattr(result, "modified_count", 0) if result is not None else 0
        logger.info("Applied leave defaults to %d balances for %d", modified, year)
        return modified
