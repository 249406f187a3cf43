"""JSON API route handlers for the meeting scheduler."""

from flask import request, jsonify, Response

from application.validation import parse_year_month
from domain import NotificationStatus
from monitoring import ValidationError


SLACK_STATUS_MESSAGES = {
    NotificationStatus.SENT: "Slack への送信に成功しました",
    NotificationStatus.FAILED: "Slack への送信に失敗しました",
    NotificationStatus.ERROR: "Slack への送信でエラーが発生しました",
    NotificationStatus.NOT_CONFIGURED: None,
}


def read_json_body() -> dict:
    """Request body as a JSON object; an empty body reads as {}."""
    if not request.get_data():
        return {}
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        raise ValidationError("リクエストボディの JSON が不正です。")
    return body


def register_api_routes(app, services):
    """Register /api routes."""

    # Projects
    @app.route('/api/projects', methods=['GET'])
    def list_projects():
        projects, meta = services.projects.get_projects()
        return jsonify({
            'projects': [project.to_dict() for project in projects],
            'meta': meta.to_dict()
        })

    @app.route('/api/projects/custom', methods=['POST'])
    def create_custom_project():
        body = read_json_body()
        project = services.projects.add_project(body.get('name'), body.get('members'))
        _, meta = services.projects.get_projects()
        return jsonify({'project': project.to_dict(), 'meta': meta.to_dict()}), 201

    @app.route('/api/projects/<project_id>/custom-members', methods=['POST'])
    def create_custom_members(project_id):
        body = read_json_body()
        project, added = services.projects.add_members(project_id, body.get('members'))
        return jsonify({
            'project': project.to_dict(),
            'addedMembers': [member.to_dict() for member in added],
            'meta': services.projects.last_meta.to_dict()
        }), 201

    # Agenda templates
    @app.route('/api/agenda-templates', methods=['GET'])
    def list_agenda_templates():
        return jsonify({'templates': [t.to_dict() for t in services.templates.list_templates()]})

    # Schedule
    @app.route('/api/schedule', methods=['GET'])
    def list_schedule():
        year, month = parse_year_month(request.args.get('year'), request.args.get('month'))
        events = services.schedule.list_events(year, month)
        return jsonify({'events': [event.to_dict() for event in events]})

    @app.route('/api/schedule', methods=['POST'])
    def create_schedule_event():
        event, status = services.schedule.create_event(read_json_body())
        return jsonify({
            'event': event.to_dict(),
            'slackStatus': SLACK_STATUS_MESSAGES.get(status)
        }), 201

    @app.route('/api/schedule/<event_id>', methods=['PUT'])
    def update_schedule_event(event_id):
        event = services.schedule.update_event(event_id, read_json_body())
        return jsonify({'event': event.to_dict(), 'slackStatus': None})

    @app.route('/api/schedule/<event_id>', methods=['DELETE'])
    def delete_schedule_event(event_id):
        services.schedule.delete_event(event_id)
        return jsonify({})

    @app.route('/api/schedule.ics', methods=['GET'])
    def export_schedule():
        year_param = request.args.get('year')
        month_param = request.args.get('month')
        if year_param is None and month_param is None:
            calendar_data = services.schedule.export_calendar()
            filename = 'schedule.ics'
        else:
            year, month = parse_year_month(year_param, month_param)
            calendar_data = services.schedule.export_calendar(year, month)
            filename = f'schedule-{year}-{month:02d}.ics'

        return Response(
            calendar_data,
            mimetype='text/calendar; charset=utf-8',
            headers={'Content-Disposition': f'attachment; filename="{filename}"'}
        )

    # Retired endpoint, kept so old clients get a clear answer
    @app.route('/api/assign', methods=['POST'])
    def assign_retired():
        return jsonify({
            'error': "スケジューラー API に統合されました。/api/schedule を利用してください。"
        }), 410

    # Holidays
    @app.route('/api/holidays', methods=['GET'])
    def list_holidays():
        return jsonify({'holidays': [h.to_dict() for h in services.holidays.list_holidays()]})

    @app.route('/api/holidays', methods=['POST'])
    def create_holiday():
        body = read_json_body()
        holiday = services.holidays.add_holiday(body.get('date'), body.get('name'))
        return jsonify({'holiday': holiday.to_dict()}), 201

    @app.route('/api/holidays/<holiday_id>', methods=['DELETE'])
    def delete_holiday(holiday_id):
        services.holidays.remove_holiday(holiday_id)
        return jsonify({})
