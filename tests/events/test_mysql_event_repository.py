from __future__ import annotations

from datetime import date, datetime, time

from cca_hub.events import mysql_event_repository
from cca_hub.events.model import EventInput
from cca_hub.events.mysql_event_repository import MySQLEventRepository
from conftest import CLUB_A, StubConnectionFactory


def test_created_event_is_stamped_in_utc(monkeypatch):
    stamp = datetime(2026, 1, 1, 12, 0, 0)
    monkeypatch.setattr(mysql_event_repository, "utc_now", lambda: stamp)
    factory = StubConnectionFactory()
    data = EventInput(title="Open day", date=date(2026, 2, 1), start_time=time(10), end_time=time(12), location="Hall")

    event = MySQLEventRepository(factory).create(club_id=CLUB_A, data=data)

    _, params = factory.cursor.executed[0]
    assert event.created_at == stamp
    assert event.updated_at == stamp
    assert params[-2:] == (stamp, stamp)
