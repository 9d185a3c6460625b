import logging
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from punchclock.models.credential import Credential
from punchclock.models.employee import Employee
from punchclock.models.enums import OvertimeStatus, PunchType
from punchclock.models.overtime import OvertimeRequest
from punchclock.models.punch import Punch
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import ConflictError, InternalError

logger = logging.getLogger(__name__)


def _to_doc(model) -> dict:
    doc = model.model_dump(mode="python", exclude={"id"})
    doc["_id"] = model.id
    for key, value in list(doc.items()):
        if isinstance(value, Enum):
            doc[key] = value.value
        elif isinstance(value, date) and not isinstance(value, datetime):
            # BSON has no date-only type
            doc[key] = value.isoformat()
    return doc


def _from_doc(model_cls, doc: Optional[dict]):
    if doc is None:
        return None
    doc = dict(doc)
    doc["id"] = doc.pop("_id")
    return model_cls(**doc)


class MongoStore(AttendanceStore):
    """Motor-backed store.

    Integer ids come from a ``counters`` collection. The punch alternation
    guard lives in ``punch_state``: one document per employee holding the
    type of the last recorded punch, flipped with a filtered update so two
    concurrent punches cannot both pass.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def init_indexes(self):
        await self.db["employees"].create_index("email", unique=True)
        await self.db["credentials"].create_index("email", unique=True)
        await self.db["credentials"].create_index("reset_token", sparse=True)
        await self.db["punches"].create_index([("employee_id", ASCENDING), ("timestamp", DESCENDING)])
        await self.db["punches"].create_index([("timestamp", DESCENDING)])
        await self.db["overtime_requests"].create_index([("employee_id", ASCENDING), ("status", ASCENDING)])
        logger.info("MongoDB indexes ensured")

    async def _next_id(self, name: str) -> int:
        counter = await self.db["counters"].find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return counter["seq"]

    async def ping(self) -> bool:
        await self.db.command("ping")
        return True

    # employees

    async def find_employee(self, employee_id: int) -> Optional[Employee]:
        return _from_doc(Employee, await self.db["employees"].find_one({"_id": employee_id}))

    async def find_employee_by_email(self, email: str) -> Optional[Employee]:
        return _from_doc(Employee, await self.db["employees"].find_one({"email": email.lower()}))

    async def list_employees(self) -> List[Employee]:
        docs = await self.db["employees"].find({}).sort("_id", ASCENDING).to_list(None)
        return [_from_doc(Employee, doc) for doc in docs]

    async def insert_employee(self, employee: Employee) -> Employee:
        stored = employee.model_copy(update={"id": await self._next_id("employees")})
        await self.db["employees"].insert_one(_to_doc(stored))
        return stored

    async def update_employee(self, employee: Employee) -> Optional[Employee]:
        doc = _to_doc(employee)
        doc.pop("_id")
        result = await self.db["employees"].update_one({"_id": employee.id}, {"$set": doc})
        return employee if result.matched_count else None

    async def delete_employee(self, employee_id: int) -> bool:
        result = await self.db["employees"].delete_one({"_id": employee_id})
        return result.deleted_count > 0

    # punches

    async def find_last_punch_by_employee(self, employee_id: int) -> Optional[Punch]:
        doc = await self.db["punches"].find_one(
            {"employee_id": employee_id}, sort=[("timestamp", DESCENDING), ("_id", DESCENDING)]
        )
        return _from_doc(Punch, doc)

    async def find_punches_by_employee(self, employee_id: int) -> List[Punch]:
        cursor = self.db["punches"].find({"employee_id": employee_id}).sort(
            [("timestamp", ASCENDING), ("_id", ASCENDING)]
        )
        return [_from_doc(Punch, doc) for doc in await cursor.to_list(None)]

    async def find_punches_in_range(self, employee_id: int, start: datetime, end: datetime) -> List[Punch]:
        cursor = self.db["punches"].find(
            {"employee_id": employee_id, "timestamp": {"$gte": start, "$lte": end}}
        ).sort([("timestamp", ASCENDING), ("_id", ASCENDING)])
        return [_from_doc(Punch, doc) for doc in await cursor.to_list(None)]

    async def find_punches_between(self, start: datetime, end: datetime) -> List[Punch]:
        cursor = self.db["punches"].find({"timestamp": {"$gte": start, "$lte": end}}).sort(
            [("timestamp", ASCENDING), ("_id", ASCENDING)]
        )
        return [_from_doc(Punch, doc) for doc in await cursor.to_list(None)]

    async def find_all_punches_desc(self, limit: Optional[int] = None) -> List[Punch]:
        cursor = self.db["punches"].find({}).sort([("timestamp", DESCENDING), ("_id", DESCENDING)])
        if limit:
            cursor = cursor.limit(limit)
        return [_from_doc(Punch, doc) for doc in await cursor.to_list(None)]

    async def insert_punch_if_state(self, punch: Punch, expected_state: PunchType) -> Optional[Punch]:
        employee_id = punch.employee_id
        if expected_state == PunchType.OUT:
            # a missing document means the employee never punched, i.e. OUT
            try:
                await self.db["punch_state"].update_one(
                    {"_id": employee_id, "last_type": {"$ne": PunchType.IN.value}},
                    {"$set": {"last_type": punch.punch_type.value}},
                    upsert=True,
                )
            except DuplicateKeyError:
                return None
        else:
            result = await self.db["punch_state"].update_one(
                {"_id": employee_id, "last_type": PunchType.IN.value},
                {"$set": {"last_type": punch.punch_type.value}},
            )
            if result.matched_count == 0:
                return None

        stored = punch.model_copy(update={"id": await self._next_id("punches")})
        try:
            await self.db["punches"].insert_one(_to_doc(stored))
        except PyMongoError as e:
            logger.error("Punch insert failed after state flip for employee %s; restoring state", employee_id)
            await self.db["punch_state"].update_one(
                {"_id": employee_id}, {"$set": {"last_type": expected_state.value}}
            )
            raise InternalError("Could not record punch.") from e
        return stored

    # overtime requests

    async def insert_overtime(self, request: OvertimeRequest) -> OvertimeRequest:
        stored = request.model_copy(update={"id": await self._next_id("overtime_requests")})
        await self.db["overtime_requests"].insert_one(_to_doc(stored))
        return stored

    async def find_overtime(self, request_id: int) -> Optional[OvertimeRequest]:
        return _from_doc(OvertimeRequest, await self.db["overtime_requests"].find_one({"_id": request_id}))

    async def find_overtime_by_status(self, status: OvertimeStatus) -> List[OvertimeRequest]:
        cursor = self.db["overtime_requests"].find({"status": status.value}).sort("_id", ASCENDING)
        return [_from_doc(OvertimeRequest, doc) for doc in await cursor.to_list(None)]

    async def find_overtime_by_employee_and_status(
        self, employee_id: int, status: OvertimeStatus
    ) -> List[OvertimeRequest]:
        cursor = self.db["overtime_requests"].find(
            {"employee_id": employee_id, "status": status.value}
        ).sort("_id", ASCENDING)
        return [_from_doc(OvertimeRequest, doc) for doc in await cursor.to_list(None)]

    async def transition_overtime(
        self, request_id: int, from_status: OvertimeStatus, to_status: OvertimeStatus
    ) -> Optional[OvertimeRequest]:
        doc = await self.db["overtime_requests"].find_one_and_update(
            {"_id": request_id, "status": from_status.value},
            {"$set": {"status": to_status.value}},
            return_document=ReturnDocument.AFTER,
        )
        return _from_doc(OvertimeRequest, doc)

    # credentials

    async def find_credential_by_email(self, email: str) -> Optional[Credential]:
        return _from_doc(Credential, await self.db["credentials"].find_one({"email": email.lower()}))

    async def find_credential_by_reset_token(self, token: str) -> Optional[Credential]:
        return _from_doc(Credential, await self.db["credentials"].find_one({"reset_token": token}))

    async def find_credential_by_employee(self, employee_id: int) -> Optional[Credential]:
        return _from_doc(Credential, await self.db["credentials"].find_one({"employee_id": employee_id}))

    async def insert_credential(self, credential: Credential) -> Credential:
        stored = credential.model_copy(update={"id": await self._next_id("credentials")})
        await self.db["credentials"].insert_one(_to_doc(stored))
        return stored

    async def delete_credential(self, credential_id: int) -> bool:
        result = await self.db["credentials"].delete_one({"_id": credential_id})
        return result.deleted_count > 0

    async def update_credential_email(self, credential_id: int, email: str) -> bool:
        try:
            result = await self.db["credentials"].update_one(
                {"_id": credential_id}, {"$set": {"email": email.lower()}}
            )
        except DuplicateKeyError:
            raise ConflictError(f"An account with email {email} already exists.", code="EMAIL_TAKEN")
        return result.matched_count > 0

    async def count_credentials(self) -> int:
        return await self.db["credentials"].count_documents({})

    async def set_reset_token(self, credential_id: int, token: str, expires_at: datetime) -> bool:
        result = await self.db["credentials"].update_one(
            {"_id": credential_id},
            {"$set": {"reset_token": token, "reset_token_expires_at": expires_at}},
        )
        return result.matched_count > 0

    async def clear_reset_token(self, credential_id: int) -> bool:
        return await self.set_reset_token(credential_id, None, None)

    async def redeem_reset_token(self, token: str, password_hash: str) -> bool:
        result = await self.db["credentials"].update_one(
            {"reset_token": token},
            {"$set": {"password_hash": password_hash, "reset_token": None, "reset_token_expires_at": None}},
        )
        return result.modified_count > 0

    async def clear_expired_reset_tokens(self, now: datetime) -> int:
        result = await self.db["credentials"].update_many(
            {"reset_token": {"$ne": None}, "reset_token_expires_at": {"$lt": now}},
            {"$set": {"reset_token": None, "reset_token_expires_at": None}},
        )
        return result.modified_count
