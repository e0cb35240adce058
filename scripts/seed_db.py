"""Create the demo accounts and one demo CCA the cca_admin account manages."""

from __future__ import annotations

import importlib

from cca_hub.clubs.model import Club, ScheduleSlot
from cca_hub.clubs.mongo_club_repository import MongoClubRepository
from cca_hub.common.datetime_utils import utc_now
from cca_hub.config import get_settings_module
from cca_hub.core.enums import Category, Commitment, SportType
from cca_hub.database.bootstrap import ensure_demo_users
from cca_hub.database.mongo import MongoConnection

DEMO_CLUB_ID = "000000000000000000000001"


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    clubs = MongoClubRepository(MongoConnection.get_instance(settings.MONGO_URI, settings.MONGO_DB))
    if clubs.get_by_id(DEMO_CLUB_ID) is None:
        now = utc_now()
        clubs.insert(
            Club(
                club_id=DEMO_CLUB_ID,
                name="Demo Badminton Club",
                category=Category.SPORTS,
                commitment=Commitment.SCHEDULE_BASED,
                schedule=(ScheduleSlot(day="Wednesday", start_time="18:00", end_time="20:00", location="Sports Hall"),),
                sport_type=SportType.RECREATIONAL,
                short_description="Weekly social badminton.",
                created_at=now,
                updated_at=now,
            )
        )

    ensure_demo_users(db_config, demo_club_id=DEMO_CLUB_ID)

    print(
        "OK: Seeded database -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
        f" + {settings.MONGO_DB}.clubs"
    )


if __name__ == "__main__":
    main()
