"""
Dashboard and report aggregation. Everything is recomputed from raw
attendance / leave / user documents on each call.
"""
import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from hrmaster.core.constants import ROLE_EMPLOYEE
from hrmaster.core.timezone_utils import (
    local_day, month_bounds, previous_month_bounds, to_local, to_storage, week_bounds,
)
from hrmaster.models.attendance import Attendance, AttendanceCorrection
from hrmaster.models.leave import Leave
from hrmaster.models.notifications import Notification
from hrmaster.models.users import User

logger = logging.getLogger(__name__)

WORKED_STATUSES = ("present", "late")


def _r1(value: float) -> float:
    return round(value, 1)


def _pct(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole else 0.0


def _activity_time(dt: datetime) -> str:
    return to_local(dt).strftime("%b %d, %I:%M %p")


def _activity(id: str, user: str, action: str, timestamp: datetime, status: Optional[str] = None) -> Dict[str, Any]:
    item = {
        "id": id,
        "user": user,
        "action": action,
        "time": _activity_time(timestamp),
        "timestamp": timestamp,
    }
    if status is not None:
        item["status"] = status
    return item


def _finish_feed(activities: List[Dict[str, Any]], limit: int) -> List[Dict[str, Any]]:
    activities.sort(key=lambda a: a["timestamp"], reverse=True)
    feed = activities[:limit]
    for a in feed:
        a["timestamp"] = a["timestamp"].isoformat()
    return feed


async def _records_between(start: datetime, end: datetime, user_id: Optional[str] = None) -> List[Attendance]:
    query: Dict[str, Any] = {"date": {"$gte": start, "$lte": end}}
    if user_id:
        query["user_id"] = user_id
    return await Attendance.find(query).to_list()


async def _approved_leave_user_ids(day: datetime) -> set:
    leaves = await Leave.find(
        {"status": "approved", "start_date": {"$lte": day}, "end_date": {"$gte": day}}
    ).to_list()
    return {l.user_id for l in leaves}


def _display_name(user: Optional[User]) -> str:
    if not user:
        return "Employee"
    return user.full_name or user.username


class ReportService:
    # ==================== Employee dashboard ====================

    @staticmethod
    async def employee_stats(user_id: str, now: datetime) -> Dict[str, Any]:
        today = local_day(now)
        month_start, month_end = month_bounds(today)
        week_start, week_end = week_bounds(today)
        last_start, last_end = previous_month_bounds(today)

        month = await _records_between(month_start, month_end, user_id)
        week = await _records_between(week_start, week_end, user_id)
        last = await _records_between(last_start, last_end, user_id)

        def summarize(records: List[Attendance]):
            present = len([r for r in records if r.status in WORKED_STATUSES])
            hours = sum(r.hours for r in records)
            avg = hours / len(records) if records else 0
            return present, hours, avg, _pct(present, len(records))

        present_days, total_hours, avg_hours, rate = summarize(month)
        week_present, week_hours, week_avg, _ = summarize(week)
        _, _, last_avg, last_rate = summarize(last)

        pending = await Leave.find({"user_id": user_id, "status": "pending"}).count()

        return {
            "present_days": present_days,
            "total_hours": _r1(total_hours),
            "avg_hours": _r1(avg_hours),
            "attendance_rate": round(rate),
            "pending_leaves": pending,
            "week_present_days": week_present,
            "week_total_hours": _r1(week_hours),
            "week_avg_hours": _r1(week_avg),
            "avg_hours_diff": _r1(avg_hours - last_avg),
            "attendance_rate_diff": _r1(rate - last_rate),
        }

    @staticmethod
    async def employee_activity(user_id: str, limit: int = 8) -> List[Dict[str, Any]]:
        attendance = await Attendance.find({"user_id": user_id}).sort("-date").limit(10).to_list()
        corrections = await AttendanceCorrection.find({"user_id": user_id}).sort("-created_at").limit(10).to_list()

        activities = []
        for r in attendance:
            if r.check_in:
                activities.append(_activity(f"{r.id}-checkin", "You", "Checked in", r.check_in, r.status))
            if r.check_out:
                activities.append(_activity(f"{r.id}-checkout", "You", "Checked out", r.check_out, r.status))
        for c in corrections:
            activities.append(
                _activity(f"{c.id}-correction", "You", "Requested attendance correction", c.created_at, c.status)
            )
        return _finish_feed(activities, limit)

    # ==================== Admin dashboard ====================

    @staticmethod
    async def admin_stats(now: datetime) -> Dict[str, Any]:
        today = local_day(now)
        month_start, month_end = month_bounds(today)
        last_start, last_end = previous_month_bounds(today)
        # join_date is an instant; compare against the end of the last local day
        last_month_cutoff = to_storage(last_end.replace(hour=23, minute=59, second=59))

        employees = await User.find({"role": ROLE_EMPLOYEE}).to_list()
        total_employees = len(employees)
        last_month_employees = len([e for e in employees if e.join_date <= last_month_cutoff])
        new_hires = len([e for e in employees if e.join_date >= to_storage(month_start)])

        todays = await Attendance.find({"date": today}).to_list()
        present_today = len([r for r in todays if r.status in WORKED_STATUSES])
        pending_leaves = await Leave.find({"status": "pending"}).count()
        on_leave_today = await Leave.find(
            {"status": "approved", "start_date": {"$lte": today}, "end_date": {"$gte": today}}
        ).count()

        month = await _records_between(month_start, month_end)
        last = await _records_between(last_start, last_end)
        rate = _pct(len([r for r in month if r.status == "present"]), len(month))
        last_rate = _pct(len([r for r in last if r.status == "present"]), len(last))

        worked = [r for r in month if r.status in ("present", "late", "leave")]
        avg_hours_per_day = sum(r.hours for r in month) / len(worked) if worked else 0

        growth = (
            (total_employees - last_month_employees) / last_month_employees * 100
            if last_month_employees else 0
        )

        return {
            "total_employees": total_employees,
            "present_today": present_today,
            "pending_leaves": pending_leaves,
            "employees_on_leave_today": on_leave_today,
            "new_hires_this_month": new_hires,
            "avg_hours_per_day": _r1(avg_hours_per_day),
            "attendance_rate": _r1(rate),
            "last_month_attendance_rate": _r1(last_rate),
            "attendance_rate_diff": _r1(rate - last_rate),
            "last_month_employees": last_month_employees,
            "employees_growth_pct": _r1(growth),
        }

    @staticmethod
    async def today_breakdown(now: datetime) -> Dict[str, int]:
        today = local_day(now)
        employees = await User.find({"role": ROLE_EMPLOYEE}).to_list()
        todays = await Attendance.find({"date": today}).to_list()

        counts = Counter(r.status for r in todays)
        checked_in = {r.user_id for r in todays if r.check_in}
        on_leave = await _approved_leave_user_ids(today)
        not_checked_in = len(
            [e for e in employees if str(e.id) not in checked_in and str(e.id) not in on_leave]
        )

        return {
            "present": counts.get("present", 0),
            "late": counts.get("late", 0),
            "absent": counts.get("absent", 0),
            "leave": counts.get("leave", 0) or len(on_leave),
            "not_checked_in": not_checked_in,
        }

    @staticmethod
    async def not_checked_in_today(now: datetime) -> List[Dict[str, Any]]:
        """Employees without a check-in today and not on approved leave."""
        today = local_day(now)
        employees = await User.find({"role": ROLE_EMPLOYEE}).to_list()
        todays = await Attendance.find({"date": today, "check_in": {"$ne": None}}).to_list()
        checked_in = {r.user_id for r in todays}
        on_leave = await _approved_leave_user_ids(today)

        return [
            {
                "id": str(e.id),
                "name": _display_name(e),
                "department": e.department,
                "position": e.position,
            }
            for e in employees
            if str(e.id) not in checked_in and str(e.id) not in on_leave
        ]

    @staticmethod
    async def admin_activity(admin_id: str, limit: int = 20) -> List[Dict[str, Any]]:
        approved = await Leave.find({"approved_by": admin_id}).sort("-approval_date").limit(20).to_list()
        authored = await Notification.find({"actor": admin_id}).sort("-created_at").limit(30).to_list()
        reviewed = await AttendanceCorrection.find(
            {"reviewed_by": admin_id, "status": {"$in": ["approved", "rejected"]}}
        ).sort("-reviewed_at").limit(20).to_list()

        user_ids = {l.user_id for l in approved} | {n.user_id for n in authored} | {c.user_id for c in reviewed}
        users = {str(u.id): u for u in await User.find({}).to_list() if str(u.id) in user_ids}

        activities = []
        for l in approved:
            activities.append(_activity(
                f"leave-approve-{l.id}", _display_name(users.get(l.user_id)), "Approved leave",
                l.approval_date or l.updated_at,
            ))
        for c in reviewed:
            action = "Approved attendance correction" if c.status == "approved" else "Rejected attendance correction"
            activities.append(_activity(
                f"corr-{c.id}", _display_name(users.get(c.user_id)), action, c.reviewed_at or c.updated_at,
            ))
        for n in authored:
            # decision notifications already appear through the records above
            if n.title in ("Leave Request Approved", "Correction Request Approved", "Correction Request Rejected"):
                continue
            if n.title == "Leave Request Rejected":
                activity_id, action = f"leave-reject-{n.id}", "Rejected leave"
            elif n.title == "Attendance Updated":
                activity_id, action = f"notif-{n.id}", "Updated attendance"
            else:
                activity_id, action = f"notif-{n.id}", "Created notification"
            activities.append(_activity(activity_id, _display_name(users.get(n.user_id)), action, n.created_at))

        return _finish_feed(activities, limit)

    @staticmethod
    async def top_employees(now: datetime) -> Dict[str, Any]:
        month_start, month_end = month_bounds(local_day(now))
        records = await _records_between(month_start, month_end)

        metrics: Dict[str, Dict[str, float]] = defaultdict(lambda: {"hours": 0, "present": 0, "late": 0, "absent": 0})
        for r in records:
            acc = metrics[r.user_id]
            acc["hours"] += r.hours or 0
            if r.status in ("present", "late", "absent"):
                acc[r.status] += 1

        if not metrics:
            return {"most_worked": None, "most_regular": None, "most_punctual": None, "most_absent": None}

        entries = list(metrics.items())
        winners = {
            "most_worked": max(entries, key=lambda e: e[1]["hours"]),
            "most_regular": max(entries, key=lambda e: e[1]["present"] + e[1]["late"]),
            "most_punctual": min(entries, key=lambda e: e[1]["late"]),
            "most_absent": max(entries, key=lambda e: e[1]["absent"]),
        }
        users = {str(u.id): u for u in await User.find({}).to_list()}

        result = {}
        for key, (user_id, acc) in winners.items():
            result[key] = {
                "id": user_id,
                "name": _display_name(users.get(user_id)),
                "metrics": {**acc, "hours": _r1(acc["hours"])},
            }
        return result

    @staticmethod
    async def employees_summary(start: datetime, end: datetime) -> List[Dict[str, Any]]:
        """Per-employee status counts and hours between two calendar days."""
        employees = await User.find({"role": ROLE_EMPLOYEE}).to_list()
        records = await _records_between(start, end)

        acc: Dict[str, Dict[str, float]] = defaultdict(
            lambda: {"present": 0, "late": 0, "absent": 0, "leave": 0, "hours": 0}
        )
        for r in records:
            a = acc[r.user_id]
            a[r.status] += 1
            a["hours"] += r.hours or 0

        summaries = []
        for e in employees:
            s = acc.get(str(e.id)) or {"present": 0, "late": 0, "absent": 0, "leave": 0, "hours": 0}
            summaries.append({
                "id": str(e.id),
                "name": _display_name(e),
                "department": e.department or "",
                "position": e.position or "",
                "present": s["present"],
                "late": s["late"],
                "absent": s["absent"],
                "leave": s["leave"],
                "hours": _r1(s["hours"]),
            })
        return summaries
