from flask import Flask
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from typing import Optional, Dict, Any
import os

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()

_ENV_DEFAULTS = {
    'JWT_SECRET_KEY': 'dev-secret',
    'DATABASE_URL': 'sqlite:///dev.db',
    'BLOB_ROOT': os.path.abspath('blobs'),
    'BLOB_BASE_URL': '/blobs',
    'ADMIN_ACCESS_CODE': None,
    'TECH_ACCESS_CODE': None,
}


def _build_engine(db_url: str):
    if db_url.endswith(':memory:'):
        # every session must see the same in-memory database
        return create_engine(db_url, future=True, connect_args={'check_same_thread': False}, poolclass=StaticPool)
    return create_engine(db_url, future=True)


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)
    for key, default in _ENV_DEFAULTS.items():
        app.config[key] = os.getenv(key, default)
    if config:
        app.config.update(config)

    db_engine = _build_engine(app.config['DATABASE_URL'])
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    from .routes.auth import auth_bp
    from .routes.orders import orders_bp
    from .routes.blobs import blobs_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(orders_bp, url_prefix='/orders')
    app.register_blueprint(blobs_bp, url_prefix='/blobs')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    @app.teardown_appcontext
    def remove_session(exc):  # type: ignore
        if SessionLocal is not None:
            SessionLocal.remove()

    from .errors import RepairDeskError, error_payload

    @app.errorhandler(RepairDeskError)
    def handle_domain_error(e):  # type: ignore
        if e.status_code >= 500:
            app.logger.error('%s: %s', e.title, e.detail)
        return e.to_payload(), e.status_code

    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, HTTPException):
            return error_payload(e.code, e.name, e.description), e.code
        app.logger.exception('Unhandled exception')
        return error_payload(500, 'Internal Server Error', 'Unexpected error'), 500

    return app


def get_db():
    return SessionLocal()
