import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Query, Request, status

from backend.exceptions import (
    get_conflict_exception,
    get_invalid_input_exception,
    get_unknown_entity_exception,
)
from backend.schemas import (
    BreakdownPreview,
    CreateHoliday,
    CreateLeave,
    DirectoryEntryOut,
    DirectoryOut,
    LeaveDecision,
    LeaveOut,
    NotificationList,
    PendingLeaveOut,
    PermissionCheck,
    PermissionOut,
    UpdateBalance,
    UpdateHoliday,
    UpdateLeave,
    UpdatePermission,
)
from core.change_feed import ChangeFeed
from core.config import settings
from core.db import RowStore, get_conn, init_db
from core.directory import lookup
from core.holiday import add_holiday, date_taken, delete_holiday, list_holidays, update_holiday
from core.leave_approval import decide_leave, list_notifications, mark_notification_read
from core.leave_balance import LeaveBalance, get_balance, list_balances, set_balance
from core.leave_calculation import (
    create_leave,
    delete_leave,
    get_leave,
    get_leave_breakdown,
    list_leaves,
    preview_breakdown,
    update_leave,
)
from core.leave_models import ClassificationResult, Holiday
from core.live_rows import PendingLeaveBoard
from core.permissions import ACTIONS, PERMISSION_TYPES, ROLES, PermissionCache
from core.seed import seed_defaults

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


def create_app(db_path: str | None = None) -> FastAPI:
    app = FastAPI(title=settings.PROJECT_TITLE)
    app.state.db_path = db_path or settings.DB_PATH
    app.state.feed = ChangeFeed()

    # long-lived readers share one locked store; requests get their own
    conn = get_conn(app.state.db_path)
    init_db(conn)
    shared = RowStore(conn, app.state.feed)
    seed_defaults(shared)
    app.state.permissions = PermissionCache(shared)
    app.state.pending = PendingLeaveBoard(shared)

    register_routes(app)
    logger.info("Backend ready on %s", app.state.db_path)
    return app


# ------------ DB dependency ------------
def get_store(request: Request):
    store = RowStore(get_conn(request.app.state.db_path), request.app.state.feed)
    try:
        yield store
    finally:
        store.close()


def get_permissions(request: Request) -> PermissionCache:
    return request.app.state.permissions


def get_pending_board(request: Request) -> PendingLeaveBoard:
    return request.app.state.pending


def _with_names(store, leaves) -> List[LeaveOut]:
    names = lookup(store, [l.user_id for l in leaves])
    return [
        LeaveOut(
            **l.model_dump(),
            user_name=names[l.user_id].name if l.user_id in names else "Unknown User",
        )
        for l in leaves
    ]


def register_routes(app: FastAPI):

    @app.get("/")
    def root():
        return {"message": f"{settings.PROJECT_TITLE} API"}

    # ------------ leaves ------------
    @app.get("/leaves", response_model=List[LeaveOut])
    def get_leaves(
        status_filter: Optional[str] = Query(default=None, alias="status"),
        user_id: Optional[str] = None,
        store: RowStore = Depends(get_store),
    ):
        try:
            leaves = list_leaves(store, status=status_filter, user_id=user_id)
        except ValueError as e:
            raise get_invalid_input_exception(str(e))
        return _with_names(store, leaves)

    @app.post("/leaves", response_model=LeaveOut, status_code=status.HTTP_201_CREATED)
    def post_leave(payload: CreateLeave, store: RowStore = Depends(get_store)):
        leave = create_leave(store, **payload.model_dump())
        return _with_names(store, [leave])[0]

    @app.post("/leaves/breakdown/preview", response_model=Optional[ClassificationResult])
    def post_breakdown_preview(payload: BreakdownPreview, store: RowStore = Depends(get_store)):
        if payload.from_date > payload.to_date:
            raise get_invalid_input_exception("to_date cannot be earlier than from_date")
        return preview_breakdown(
            store, payload.user_id, payload.from_date, payload.to_date, payload.leave_id
        )

    @app.get("/leaves/pending", response_model=List[PendingLeaveOut])
    def get_pending_leaves(
        store: RowStore = Depends(get_store),
        board: PendingLeaveBoard = Depends(get_pending_board),
    ):
        items = board.items()
        named = _with_names(store, [leave for leave, _ in items])
        return [
            PendingLeaveOut(**leave.model_dump(), breakdown=breakdown)
            for leave, (_, breakdown) in zip(named, items)
        ]

    @app.get("/leaves/{leave_id}", response_model=LeaveOut)
    def get_one_leave(leave_id: str, store: RowStore = Depends(get_store)):
        leave = get_leave(store, leave_id)
        if leave is None:
            raise get_unknown_entity_exception("Leave")
        return _with_names(store, [leave])[0]

    @app.patch("/leaves/{leave_id}", response_model=LeaveOut)
    def patch_leave(leave_id: str, payload: UpdateLeave, store: RowStore = Depends(get_store)):
        try:
            leave = update_leave(store, leave_id, **payload.model_dump(exclude_unset=True))
        except ValueError as e:
            raise get_invalid_input_exception(str(e))
        if leave is None:
            raise get_unknown_entity_exception("Leave")
        return _with_names(store, [leave])[0]

    @app.delete("/leaves/{leave_id}", status_code=status.HTTP_204_NO_CONTENT)
    def remove_leave(leave_id: str, store: RowStore = Depends(get_store)):
        if not delete_leave(store, leave_id):
            raise get_unknown_entity_exception("Leave")

    @app.get("/leaves/{leave_id}/breakdown", response_model=Optional[ClassificationResult])
    def get_breakdown(leave_id: str, store: RowStore = Depends(get_store)):
        if get_leave(store, leave_id) is None:
            raise get_unknown_entity_exception("Leave")
        return get_leave_breakdown(store, leave_id)

    @app.post("/leaves/{leave_id}/decision", response_model=LeaveOut)
    def post_decision(leave_id: str, payload: LeaveDecision, store: RowStore = Depends(get_store)):
        if get_leave(store, leave_id) is None:
            raise get_unknown_entity_exception("Leave")

        ok, message = decide_leave(store, leave_id, payload.status)
        if not ok:
            raise get_conflict_exception(message)
        return _with_names(store, [get_leave(store, leave_id)])[0]

    # ------------ holidays ------------
    @app.get("/holidays", response_model=List[Holiday])
    def get_holidays(year: Optional[int] = None, store: RowStore = Depends(get_store)):
        return list_holidays(store, year)

    @app.post("/holidays", response_model=Holiday, status_code=status.HTTP_201_CREATED)
    def post_holiday(payload: CreateHoliday, store: RowStore = Depends(get_store)):
        if date_taken(store, payload.date):
            raise get_conflict_exception(f"A holiday already exists on {payload.date.isoformat()}")
        return add_holiday(
            store,
            payload.holiday_name,
            payload.date,
            payload.description,
            payload.is_recurring,
        )

    @app.patch("/holidays/{holiday_id}", response_model=Holiday)
    def patch_holiday(holiday_id: str, payload: UpdateHoliday, store: RowStore = Depends(get_store)):
        if payload.date is not None and date_taken(store, payload.date, exclude_id=holiday_id):
            raise get_conflict_exception(f"A holiday already exists on {payload.date.isoformat()}")
        holiday = update_holiday(store, holiday_id, **payload.model_dump(exclude_unset=True))
        if holiday is None:
            raise get_unknown_entity_exception("Holiday")
        return holiday

    @app.delete("/holidays/{holiday_id}", status_code=status.HTTP_204_NO_CONTENT)
    def remove_holiday(holiday_id: str, store: RowStore = Depends(get_store)):
        if not delete_holiday(store, holiday_id):
            raise get_unknown_entity_exception("Holiday")

    # ------------ directory ------------
    @app.get("/directory", response_model=DirectoryOut)
    def get_directory(ids: List[str] = Query(default=[]), store: RowStore = Depends(get_store)):
        found = lookup(store, ids)
        return DirectoryOut(entries={
            i: DirectoryEntryOut(id=e.id, kind=e.kind.value, name=e.name, email=e.email)
            for i, e in found.items()
        })

    # ------------ permissions ------------
    @app.get("/permissions/{role}", response_model=List[PermissionOut])
    def get_role_permissions(role: str, cache: PermissionCache = Depends(get_permissions)):
        if role not in ROLES:
            raise get_unknown_entity_exception("Role")
        return cache.role_permissions(role)

    @app.get("/permissions/{role}/{permission_type}/{action}", response_model=PermissionCheck)
    def check_permission(
        role: str,
        permission_type: str,
        action: str,
        cache: PermissionCache = Depends(get_permissions),
    ):
        if role not in ROLES or permission_type not in PERMISSION_TYPES or action not in ACTIONS:
            raise get_unknown_entity_exception("Permission")
        return PermissionCheck(
            role=role,
            permission_type=permission_type,
            action=action,
            allowed=cache.has_permission(role, permission_type, action),
        )

    @app.patch("/permissions/{permission_id}", response_model=PermissionOut)
    def patch_permission(
        permission_id: str,
        payload: UpdatePermission,
        cache: PermissionCache = Depends(get_permissions),
    ):
        row = cache.set_permission(permission_id, payload.is_enabled)
        if row is None:
            raise get_unknown_entity_exception("Permission")
        return row

    # ------------ notifications ------------
    @app.get("/notifications/{user_id}", response_model=NotificationList)
    def get_notifications(user_id: str, unread_only: bool = False, store: RowStore = Depends(get_store)):
        return NotificationList(notifications=list_notifications(store, user_id, unread_only))

    @app.patch("/notifications/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
    def read_notification(notification_id: str, store: RowStore = Depends(get_store)):
        if not mark_notification_read(store, notification_id):
            raise get_unknown_entity_exception("Notification")

    # ------------ leave balances ------------
    @app.get("/balances", response_model=List[LeaveBalance])
    def get_balances(year: Optional[int] = None, store: RowStore = Depends(get_store)):
        return list_balances(store, year)

    @app.get("/balances/{person_id}", response_model=LeaveBalance)
    def get_person_balance(person_id: str, year: Optional[int] = None, store: RowStore = Depends(get_store)):
        balance = get_balance(store, person_id, year)
        if balance is None:
            raise get_unknown_entity_exception("Balance holder")
        return balance

    @app.put("/balances/{person_id}", response_model=LeaveBalance)
    def put_balance(person_id: str, payload: UpdateBalance, store: RowStore = Depends(get_store)):
        counts = payload.model_dump(exclude_none=True)
        year = counts.pop("year", None)
        balance = set_balance(store, person_id, year, **counts)
        if balance is None:
            raise get_unknown_entity_exception("Balance holder")
        return balance


app = create_app()
