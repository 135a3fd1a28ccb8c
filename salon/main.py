import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from salon.core import config
from salon.database import Base, build_engine, build_session_factory, ensure_appointment_schema, seed_default_services
from salon.models import appointment, service, stylist, user  # noqa: F401
from salon.notifications.gateway import NotificationGateway
from salon.routes import appointment_routes, catalog_routes
from salon.scheduling.locking import BookingLocks

logger = logging.getLogger(__name__)


def create_app(database_url: str | None = None, notification_gateway=None) -> FastAPI:
    config.validate_runtime_config()

    engine = build_engine(database_url or config.DATABASE_URL)

    app = FastAPI(title='Salon Booking API')
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.booking_locks = BookingLocks()
    app.state.notification_gateway = notification_gateway or NotificationGateway.from_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=['*'],
        allow_headers=['*'],
    )

    @app.on_event('startup')
    def initialize_database() -> None:
        try:
            Base.metadata.create_all(bind=engine)
            ensure_appointment_schema(engine)
            if config.SEED_DEFAULT_SERVICES:
                db = app.state.session_factory()
                try:
                    if seed_default_services(db):
                        logger.info('Default services inserted')
                finally:
                    db.close()
        except SQLAlchemyError:
            logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')

    @app.on_event('shutdown')
    def dispose_engine() -> None:
        engine.dispose()

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        messages = [error.get('msg', 'Invalid input.') for error in exc.errors()]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={'detail': '; '.join(messages) or 'Invalid input.'},
        )

    @app.get('/')
    def root():
        return {'status': 'Salon Booking API Running'}

    app.include_router(catalog_routes.router)
    app.include_router(appointment_routes.router, prefix='/appointments')

    return app


app = create_app()
