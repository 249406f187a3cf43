"""Health monitoring for the meeting scheduler."""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass, field

from .exceptions import error_handler


@dataclass
class HealthStatus:
    """Health status information."""

    healthy: bool
    timestamp: datetime
    services: Dict[str, bool]
    project_source: Dict[str, Any] = field(default_factory=dict)
    last_error: Dict[str, Any] = None
    error_count: int = 0


class HealthChecker:
    """Health monitoring for the application."""

    def __init__(self, project_service, data_dir: Path):
        self.project_service = project_service
        self.data_dir = Path(data_dir)
        self.logger = logging.getLogger(__name__)

    def check_health(self) -> HealthStatus:
        """Check storage and the last remote project resolution."""
        timestamp = datetime.now(timezone.utc)
        services = {}

        services['storage'] = self.data_dir.is_dir() and os.access(self.data_dir, os.W_OK)

        # A disabled remote source is healthy; the local list is in use
        meta = self.project_service.last_meta
        remote = meta.remote_info
        services['remote_source'] = not remote.enabled or remote.error is None

        error_stats = error_handler.get_error_stats()
        last_error = None
        if error_stats['last_errors']:
            latest_key = max(error_stats['last_errors'].keys(),
                             key=lambda k: error_stats['last_errors'][k]['timestamp'])
            last_error = error_stats['last_errors'][latest_key]

        return HealthStatus(
            healthy=all(services.values()),
            timestamp=timestamp,
            services=services,
            project_source=meta.to_dict(),
            last_error=last_error,
            error_count=error_stats['total_errors']
        )

    def get_health_summary(self) -> Dict[str, Any]:
        """Get health summary for API responses."""
        try:
            health_status = self.check_health()
        except Exception as e:
            error_handler.handle_error(e, "health_summary")
            return {
                'healthy': False,
                'timestamp': datetime.now(timezone.utc).isoformat(),
                'error': 'Health check failed'
            }

        return {
            'healthy': health_status.healthy,
            'timestamp': health_status.timestamp.isoformat(),
            'services': health_status.services,
            'project_source': health_status.project_source,
            'last_error': health_status.last_error,
            'error_count': health_status.error_count
        }
