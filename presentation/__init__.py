"""Presentation layer for the meeting scheduler."""

from .app import create_app, build_services, Services

__all__ = ['create_app', 'build_services', 'Services']
