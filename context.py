import logging
from typing import TYPE_CHECKING, Dict, Optional

from fastapi import Request
from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from services import ActivityLogService, NotificationService, RecycleBinService
from settings import Settings

if TYPE_CHECKING:
    from crud import Resource

logger = logging.getLogger(__name__)


class AppContext:
    """Process-wide state built once at startup and handed to every request.

    Holds the settings, the database handle, the side-effect services and the
    registry of CRUD resources (entity name -> Resource).
    """

    def __init__(self, settings: Settings, database: Database):
        self.settings = settings
        self.db = database
        self.resources: Dict[str, "Resource"] = {}
        self.notifications = NotificationService(database["notifications"])
        self.activity = ActivityLogService(database["activity_logs"])
        self.recycle_bin = RecycleBinService(database["recycle_bin"])

    @classmethod
    def connect(cls, settings: Settings) -> "AppContext":
        client = MongoClient(settings.database_url, tz_aware=True, serverSelectionTimeoutMS=5000)
        return cls(settings, client[settings.database_name])

    def register(self, resource: "Resource") -> None:
        self.resources[resource.name] = resource

    def collection(self, name: str) -> Collection:
        return self.db[name]

    def resource(self, name: str) -> Optional["Resource"]:
        return self.resources.get(name)

    def ensure_indexes(self) -> None:
        try:
            self.db["users"].create_index("username", unique=True)
            self.db["users"].create_index(
                "email",
                unique=True,
                partialFilterExpression={"email": {"$type": "string"}},
            )
        except PyMongoError as e:
            logger.warning("Could not create indexes: %s", e)


def get_ctx(request: Request) -> AppContext:
    return request.app.state.ctx
