"""Flask JSON endpoints for previewing and triggering maintenance schedules."""

from pathlib import Path

from flask import Flask, current_app, jsonify, request

from maintenance import (
    ConfigurationError,
    LoggingNotifier,
    ScheduleRunner,
    SqliteCycleLedger,
    YamlAssetReadings,
    YamlScheduleStore,
    YamlWorkOrderLog,
    approaching_thresholds,
    load_schedule_file,
    preview_schedule_occurrences,
)
from maintenance.logger import get_logger, init_logging
from maintenance.settings import settings
from maintenance.thresholds import UsageStatus, schedule_usage

log = get_logger(__name__)


def usage_dict(usage: UsageStatus):
    """Serialize usage progress for JSON responses."""
    if usage is None:
        return None
    return {
        "current": usage.current,
        "lastTriggered": usage.last_triggered,
        "interval": usage.interval,
        "nextTrigger": usage.next_trigger,
        "remaining": usage.remaining,
        "progress": usage.progress,
    }


def error_response(status: int, message: str):
    return jsonify({"error": message}), status


def schedule_path() -> Path:
    return Path(current_app.config["SCHEDULE_FILE"])


def make_runner() -> ScheduleRunner:
    path = schedule_path()
    return ScheduleRunner(
        store=YamlScheduleStore(path),
        readings=YamlAssetReadings(path),
        generator=YamlWorkOrderLog(path),
        ledger=SqliteCycleLedger(current_app.config["LEDGER_PATH"]),
        notifier=LoggingNotifier(),
    )


def create_app(schedule_file=None, ledger_path=None) -> Flask:
    app = Flask(__name__)
    app.secret_key = settings.SECRET_KEY
    app.config["SCHEDULE_FILE"] = str(schedule_file or settings.SCHEDULE_FILE)
    app.config["LEDGER_PATH"] = str(ledger_path or settings.LEDGER_PATH)

    @app.route("/schedules/<schedule_id>/preview")
    def preview(schedule_id: str):
        """Upcoming occurrences, plus usage progress where usage triggers are set."""
        count = request.args.get("count", str(settings.PREVIEW_DEFAULT))
        try:
            count = int(count)
        except ValueError:
            count = 0
        if not 1 <= count <= settings.PREVIEW_MAX:
            return error_response(400, f"Count must be between 1 and {settings.PREVIEW_MAX}")

        schedule_file = load_schedule_file(schedule_path())
        schedule = schedule_file.get_schedule(schedule_id)
        if schedule is None:
            return error_response(404, "Maintenance schedule not found")

        try:
            schedule.validate()
        except ConfigurationError as exc:
            return error_response(400, str(exc))

        occurrences = preview_schedule_occurrences(schedule, count)
        usage = schedule_usage(schedule, schedule_file.readings.get(schedule.asset_id))
        return jsonify({
            "scheduleId": schedule.schedule_id,
            "scheduleName": schedule.name,
            "mileage": usage_dict(usage["mileage"]),
            "hours": usage_dict(usage["hours"]),
            "count": len(occurrences),
            "occurrences": [
                {
                    "dueDate": o.due_date.isoformat(),
                    "leadDate": o.lead_date.isoformat(),
                }
                for o in occurrences
            ],
        })

    @app.route("/generate", methods=["POST"])
    def generate():
        """Run a pass over all active schedules, or over one schedule."""
        body = request.get_json(silent=True) or {}
        schedule_id = body.get("scheduleId")
        runner = make_runner()

        if schedule_id:
            schedule = runner.store.get(schedule_id)
            if schedule is None:
                return error_response(404, "Schedule not found")
            if not schedule.is_active:
                return error_response(400, "Schedule is not active")
            outcome = runner.evaluate_schedule(schedule)
            log.info("Manual generation for %s: %s", schedule_id, outcome.state.value)
            return jsonify({"results": [outcome.to_dict()]})

        summary = runner.run_evaluation_pass(organisation_id=body.get("organisationId"))
        return jsonify({
            "results": [o.to_dict() for o in summary.outcomes],
            "summary": summary.to_dict(),
        })

    @app.route("/approaching-thresholds")
    def thresholds():
        """Usage schedules at or past their alert percentage."""
        schedule_file = load_schedule_file(schedule_path())
        alerts = approaching_thresholds(schedule_file.schedules, schedule_file.readings)
        return jsonify({
            "count": len(alerts),
            "schedules": [
                {
                    "id": a.schedule.schedule_id,
                    "name": a.schedule.name,
                    "assetId": a.schedule.asset_id,
                    "urgency": a.urgency,
                    "thresholdPercent": a.schedule.threshold_alert_percent,
                    "mileage": usage_dict(a.mileage),
                    "hours": usage_dict(a.hours),
                }
                for a in alerts
            ],
        })

    return app


if __name__ == "__main__":
    init_logging()
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    create_app().run(debug=True, host="0.0.0.0", port=5001)
