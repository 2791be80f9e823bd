from flask import Flask
from werkzeug.exceptions import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
from datetime import datetime
import logging
import os

load_dotenv()

db_engine = None
SessionLocal = None


def _default_clock() -> datetime:
    # Naive local time: all instants in the system are already-local.
    return datetime.now()


def _load_config(app: Flask):
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')
    app.config['DAY_START_HOUR'] = os.getenv('DAY_START_HOUR', '7')
    app.config['TIMELINE_DAYS_BEFORE'] = os.getenv('TIMELINE_DAYS_BEFORE', '7')
    app.config['TIMELINE_DAYS_AFTER'] = os.getenv('TIMELINE_DAYS_AFTER', '21')
    app.config['TIMELINE_MAX_DAYS'] = os.getenv('TIMELINE_MAX_DAYS', '120')
    app.config['HOLIDAY_REGION'] = os.getenv('HOLIDAY_REGION', 'cn')
    app.config['HOLIDAY_DATA_DIR'] = os.getenv('HOLIDAY_DATA_DIR')
    app.config['HOLIDAY_API_URL'] = os.getenv('HOLIDAY_API_URL')
    app.config['HOLIDAY_TIMEOUT'] = os.getenv('HOLIDAY_TIMEOUT', '5')
    # Optional object with fetch(year, region); takes precedence over DIR/URL sources.
    app.config['HOLIDAY_SOURCE'] = None
    app.config['CLOCK'] = _default_clock


def _validate_config(app: Flask):
    from .config import as_int
    from .config.timeline import normalize_day_start_hour, normalize_window
    from .utils.validation import normalize_region
    app.config['DAY_START_HOUR'] = normalize_day_start_hour(app.config['DAY_START_HOUR'])
    app.config['TIMELINE_MAX_DAYS'] = as_int(app.config['TIMELINE_MAX_DAYS'], 120, 'TIMELINE_MAX_DAYS')
    before, after = normalize_window(
        app.config['TIMELINE_DAYS_BEFORE'], app.config['TIMELINE_DAYS_AFTER'],
        max_days=app.config['TIMELINE_MAX_DAYS'],
    )
    app.config['TIMELINE_DAYS_BEFORE'] = before
    app.config['TIMELINE_DAYS_AFTER'] = after
    app.config['HOLIDAY_REGION'] = normalize_region(app.config['HOLIDAY_REGION'])
    try:
        app.config['HOLIDAY_TIMEOUT'] = float(app.config['HOLIDAY_TIMEOUT'])
    except (TypeError, ValueError):
        raise ValueError('HOLIDAY_TIMEOUT must be a number')
    if not callable(app.config['CLOCK']):
        raise ValueError('CLOCK must be callable')


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    _load_config(app)
    if config:
        # allow tests or callers to override default config values
        app.config.update(config)
    _validate_config(app)

    level = logging.getLevelName(str(app.config['LOG_LEVEL']).upper())
    if isinstance(level, int):
        app.logger.setLevel(level)
        logging.getLogger('labtrack').setLevel(level)

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    from .routes.assets import assets_bp
    from .routes.usage_logs import usage_bp
    from .routes.repairs import rpr_bp
    from .routes.timeline import timeline_bp
    app.register_blueprint(assets_bp, url_prefix='/assets')
    app.register_blueprint(usage_bp, url_prefix='/usage-logs')
    app.register_blueprint(rpr_bp, url_prefix='/repairs')
    app.register_blueprint(timeline_bp, url_prefix='/timeline')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    @app.teardown_appcontext
    def remove_session(exc):  # type: ignore
        if SessionLocal is not None:
            SessionLocal.remove()

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            payload = {
                'error': {
                    'status': e.code,
                    'title': e.name,
                    'detail': e.description,
                }
            }
            return payload, e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return {
            'error': {
                'status': 500,
                'title': 'Internal Server Error',
                'detail': 'Unexpected error'
            }
        }, 500

    return app


def get_db():
    return SessionLocal()


def get_clock():
    from flask import current_app
    return current_app.config['CLOCK']
