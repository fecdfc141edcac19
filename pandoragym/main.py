import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from pandoragym.core.config import Settings, load_settings, validate_runtime_config
from pandoragym.core.errors import register_exception_handlers
from pandoragym.core.timeutils import as_utc, utc_now
from pandoragym.database import Base, create_db_engine, create_session_factory
from pandoragym.models import scheduling, user, workout  # noqa: F401
from pandoragym.routes import auth_routes, exercise_routes, scheduling_routes, user_routes, workout_routes

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    settings = settings or load_settings()
    validate_runtime_config(settings)
    engine = engine or create_db_engine(settings)

    app = FastAPI(title='PandoraGym API', version=settings.version)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials='*' not in settings.cors_allow_origins,
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=['Content-Type', 'Authorization'],
        max_age=86400,
    )

    register_exception_handlers(app)

    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info('%s %s -> %s (%.1f ms)', request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    @app.on_event('startup')
    def initialize_database() -> None:
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')

    @app.get('/health')
    def health():
        return {
            'status': 'healthy',
            'timestamp': as_utc(utc_now()),
            'service': settings.service_name,
            'version': settings.version,
        }

    app.include_router(auth_routes.router, prefix='/auth')
    app.include_router(user_routes.router, prefix='/api/users')
    app.include_router(workout_routes.router, prefix='/api/workouts')
    app.include_router(exercise_routes.router, prefix='/api/exercises')
    app.include_router(scheduling_routes.router, prefix='/api/schedulings')

    return app


app = create_app()
