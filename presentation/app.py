"""Flask application factory for the meeting scheduler."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import Flask, Response, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from config import Config
from application import ProjectService, AgendaTemplateCatalog, ScheduleService, HolidayService
from infrastructure import (
    JsonFileStore, RedmineRepository, LocalProjectRepository, AgendaTemplateRepository,
    CustomDataRepository, ScheduleRepository, HolidayRepository, SlackNotifier,
    ICalendarRepository
)
from monitoring import SchedulerError, HealthChecker, error_handler
from .routes import register_api_routes


SERVICE_NAME = 'Meeting Scheduler'
SERVICE_VERSION = '1.0.0'
GENERIC_ERROR_MESSAGE = 'サーバーで問題が発生しました。'


@dataclass
class Services:
    """Service objects wired for one application instance."""
    projects: ProjectService
    templates: AgendaTemplateCatalog
    schedule: ScheduleService
    holidays: HolidayService
    health: HealthChecker


def build_services(config: Config) -> Services:
    """Create repositories and services from configuration."""
    storage = config.storage

    remote_repo = None
    if config.remote.enabled:
        remote_repo = RedmineRepository(
            base_url=config.remote.base_url,
            api_key=config.remote.api_key,
            timeout=config.remote.timeout,
            page_size=config.remote.page_size
        )

    project_service = ProjectService(
        local_repository=LocalProjectRepository(storage.projects_file),
        custom_repository=CustomDataRepository(
            JsonFileStore(storage.custom_data_file, default={'projects': [], 'memberOverrides': {}})
        ),
        remote_repository=remote_repo,
        remote_host=config.remote.host
    )

    template_catalog = AgendaTemplateCatalog(AgendaTemplateRepository(storage.templates_file))

    schedule_service = ScheduleService(
        project_service=project_service,
        template_catalog=template_catalog,
        schedule_repository=ScheduleRepository(JsonFileStore(storage.schedule_file, default=[])),
        notifier=SlackNotifier(
            webhook_url=config.notification.webhook_url,
            timeout=config.notification.timeout
        ),
        calendar_repository=ICalendarRepository()
    )

    holiday_service = HolidayService(HolidayRepository(JsonFileStore(storage.holidays_file, default=[])))

    return Services(
        projects=project_service,
        templates=template_catalog,
        schedule=schedule_service,
        holidays=holiday_service,
        health=HealthChecker(project_service, storage.data_dir)
    )


def create_app(config: Config) -> Flask:
    """Create Flask application with dependency injection."""
    app = Flask(__name__, static_folder='static', template_folder='templates')
    app.config['CONFIG'] = config
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    logger = logging.getLogger(__name__)

    services = build_services(config)
    app.config['SERVICES'] = services

    if config.remote.enabled:
        logger.info(f"Remote project source enabled: {config.remote.host}")
    else:
        logger.info("Remote project source disabled, using local projects")
    if not config.notification.enabled:
        logger.info("Webhook URL not configured, notifications disabled")

    @app.route('/', methods=['GET'])
    def index():
        return render_template('index.html')

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint."""
        summary = services.health.get_health_summary()
        summary.update({
            'status': 'healthy' if summary.get('healthy') else 'degraded',
            'service': SERVICE_NAME,
            'version': SERVICE_VERSION,
        })
        return jsonify(summary)

    register_api_routes(app, services)

    # Error handlers
    @app.errorhandler(SchedulerError)
    def scheduler_error(error: SchedulerError):
        if 'context' not in error.details:
            error_handler.handle_error(error, f"http:{request.endpoint}")
        if error.is_client_error:
            return jsonify({'error': error.message}), error.http_status
        return jsonify({'error': GENERIC_ERROR_MESSAGE}), 500

    @app.errorhandler(404)
    def not_found(error):
        return Response('Not Found', status=404, mimetype='text/plain')

    @app.errorhandler(Exception)
    def internal_error(error: Exception):
        if isinstance(error, HTTPException):
            return error
        error_handler.handle_error(error, f"http:{request.endpoint}")
        return jsonify({'error': GENERIC_ERROR_MESSAGE}), 500

    @app.after_request
    def log_request(response):
        logger.debug(f"{request.method} {request.path} -> {response.status_code}")
        return response

    logger.info(f"{SERVICE_NAME} {SERVICE_VERSION} initialized at "
                f"{datetime.now(timezone.utc).isoformat()}")
    return app
