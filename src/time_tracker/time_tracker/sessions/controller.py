from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import to_iso
from ..common.http import error_response, login_required
from ..core.exceptions import DomainError
from ..container import Container
from ..rates.model import LocationDetails
from .model import TimerSnapshot


def register(app: Flask, container: Container) -> None:
    def current_user_id() -> str:
        return str(session["user_id"])

    def lifecycle():
        return container.registry.for_user(current_user_id())

    @app.route("/api/timer/start", methods=["POST"], endpoint="timer_start")
    @login_required
    def timer_start():
        data = request.get_json(silent=True) or {}
        try:
            location = LocationDetails.from_dict(data["location"]) if data.get("location") else None
            result = lifecycle().start(location=location)
        except DomainError as e:
            return error_response(e)
        except (TypeError, ValueError):
            return jsonify({"success": False, "message": "Invalid location"}), 400

        return jsonify(
            {
                "success": True,
                "message": result.message,
                "persisted_remotely": result.persisted_remotely,
                "retry_in_seconds": result.retry_in_seconds,
                "session": result.session.to_dict(),
            }
        ), 200

    @app.route("/api/timer/stop", methods=["POST"], endpoint="timer_stop")
    @login_required
    def timer_stop():
        try:
            result = lifecycle().stop()
        except DomainError as e:
            return error_response(e)

        overtime = None
        if result.overtime is not None:
            overtime = {
                "start_time": to_iso(result.overtime.start_time),
                "end_time": to_iso(result.overtime.end_time),
                "overtime_rate": result.overtime.overtime_rate,
                "duration_minutes": result.overtime.duration_minutes,
                "earnings": round(result.overtime.earnings, 2),
            }
        return jsonify(
            {
                "success": True,
                "message": result.message,
                "persisted_remotely": result.persisted_remotely,
                "session": result.session.to_dict(),
                "earnings": result.breakdown.to_dict(),
                "overtime": overtime,
            }
        ), 200

    @app.route("/api/timer/break/start", methods=["POST"], endpoint="timer_break_start")
    @login_required
    def timer_break_start():
        data = request.get_json(silent=True) or {}
        try:
            period = lifecycle().start_break(data.get("minutes"))
        except DomainError as e:
            return error_response(e)
        return jsonify(
            {
                "success": True,
                "message": f"Break started for {period.planned_duration_minutes} minutes",
                "planned_minutes": period.planned_duration_minutes,
            }
        ), 200

    @app.route("/api/timer/break/end", methods=["POST"], endpoint="timer_break_end")
    @login_required
    def timer_break_end():
        minutes = lifecycle().end_break()
        return jsonify({"success": True, "message": "Break ended", "break_minutes": minutes}), 200

    @app.route("/api/timer/status", methods=["GET"], endpoint="timer_status")
    @login_required
    def timer_status():
        return jsonify({"success": True, "timer": snapshot_to_dict(lifecycle().tick())}), 200

    @app.route("/api/timer/retry", methods=["POST"], endpoint="timer_retry")
    @login_required
    def timer_retry():
        ok = lifecycle().retry_now()
        if not ok:
            return jsonify({"success": False, "message": "Could not reach the server. Still working offline."}), 200
        return jsonify({"success": True, "message": "Connected to server. Session saved."}), 200

    @app.route("/api/settings/rates", methods=["GET"], endpoint="rates_get")
    @login_required
    def rates_get():
        try:
            container.rate_settings_service.ensure_defaults(current_user_id())
            settings = container.rate_settings_service.get(current_user_id())
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "settings": _settings_to_dict(settings)}), 200

    @app.route("/api/settings/rates", methods=["PUT"], endpoint="rates_update")
    @login_required
    def rates_update():
        data = request.get_json(silent=True) or {}
        try:
            settings = container.rate_settings_service.update(
                user_id=current_user_id(),
                hourly_rate=data.get("hourly_rate"),
                overtime_rate=data.get("overtime_rate"),
                overtime_threshold_hours=data.get("overtime_threshold_hours"),
            )
        except DomainError as e:
            return error_response(e)
        return jsonify({"success": True, "message": "Rates saved", "settings": _settings_to_dict(settings)}), 200

    @app.route("/api/sync", methods=["POST"], endpoint="offline_sync")
    @login_required
    def offline_sync():
        result = container.sync_service.sync(current_user_id())
        return jsonify(
            {
                "success": result.success,
                "message": result.message,
                "synced": result.synced,
                "remaining": result.remaining,
            }
        ), 200


def snapshot_to_dict(snapshot: TimerSnapshot) -> dict:
    return {
        "state": snapshot.state.value,
        "session_id": snapshot.session_id,
        "start_time": to_iso(snapshot.start_time),
        "elapsed_seconds": snapshot.elapsed_seconds,
        "break_active": snapshot.break_active,
        "break_remaining_minutes": snapshot.break_remaining_minutes,
        "break_minutes": snapshot.break_minutes,
        "earnings": snapshot.earnings.to_dict() if snapshot.earnings else None,
        "sync_status": snapshot.sync_status.value if snapshot.sync_status else None,
        "retry_attempts": snapshot.retry_attempts,
        "message": snapshot.message,
    }


def _settings_to_dict(settings) -> dict:
    return {
        "hourly_rate": settings.hourly_rate,
        "overtime_rate": settings.overtime_rate,
        "overtime_threshold_hours": settings.overtime_threshold_hours,
    }
