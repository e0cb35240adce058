from __future__ import annotations

import mysql.connector
from mysql.connector.constants import ClientFlag

from cca_hub.database.connection import DatabaseConnection, DBConfig


def test_connections_report_matched_rows(monkeypatch):
    captured = {}
    monkeypatch.setattr(mysql.connector, "connect", lambda **kwargs: captured.update(kwargs) or "conn")

    conn = DatabaseConnection(DBConfig(host="db", port=3307, user="app", password="pw", database="cca_hub")).connect()

    assert conn == "conn"
    assert captured["database"] == "cca_hub"
    assert captured["port"] == 3307
    assert ClientFlag.FOUND_ROWS in captured["client_flags"]
