from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import logging
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

ROUTES_EXTENSION = 'portal.routes'
RULES_EXTENSION = 'portal.decomposition'


def _configure_logging(level_name: str):
    level = logging.getLevelName(str(level_name).upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.getLogger('portal').setLevel(level)


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['ACCESS_DENIED_PATH'] = os.getenv('ACCESS_DENIED_PATH', '/access-denied')
    app.config['SIGN_IN_PATH'] = os.getenv('SIGN_IN_PATH', '/sign-in')
    app.config['TENANT_ID_PATTERN'] = os.getenv('TENANT_ID_PATTERN', r'^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    _configure_logging(app.config['LOG_LEVEL'])

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

    jwt.init_app(app)

    # Route table and decomposition rules are built once; a bad table fails startup.
    from .services.closure import DecompositionRules
    from .services.routing import RouteAuthorizer
    from .sitemap.tables import build_route_table
    app.extensions[RULES_EXTENSION] = DecompositionRules.from_constants()
    app.extensions[ROUTES_EXTENSION] = RouteAuthorizer(
        build_route_table(),
        access_denied_path=app.config['ACCESS_DENIED_PATH'],
        sign_in_path=app.config['SIGN_IN_PATH'],
    )

    from .routes.iam import iam_bp
    from .routes.navigation import nav_bp
    app.register_blueprint(iam_bp, url_prefix='/iam')
    app.register_blueprint(nav_bp, url_prefix='/nav')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    from .errors import PortalError

    @app.errorhandler(PortalError)
    def handle_portal_error(e):  # type: ignore
        if e.status >= 500:
            app.logger.exception('Portal error')
        SessionLocal.rollback()
        return {
            'error': {
                'status': e.status,
                'title': e.title,
                'detail': e.detail,
            }
        }, e.status

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
        SessionLocal.rollback()
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


def get_authorizer(app=None):
    from flask import current_app
    return (app or current_app).extensions[ROUTES_EXTENSION]


def get_decomposition_rules(app=None):
    from flask import current_app
    return (app or current_app).extensions[RULES_EXTENSION]
