from __future__ import annotations

from flask import Flask, request

from ..common.http import current_caller, json_endpoint, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    analytics = container.analytics_service

    @app.route("/api/cca-admin/<club_id>/analytics", methods=["GET"], endpoint="cca_analytics")
    @json_endpoint
    def cca_analytics(club_id: str):
        result = analytics.club_analytics(current_caller(container.identity), club_id)
        return ok(result.to_dict())

    @app.route("/api/cca-admin/<club_id>/analytics/export", methods=["GET"], endpoint="cca_analytics_export")
    @json_endpoint
    def cca_analytics_export(club_id: str):
        file = analytics.export(current_caller(container.identity), club_id, request.args.get("format", "csv"))
        return app.response_class(
            file.content,
            mimetype=file.mimetype,
            headers={"Content-Disposition": f"attachment; filename={file.filename}"},
        )
