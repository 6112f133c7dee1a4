"""Shared FastAPI dependencies.

Settings come from ``app.state`` so an app built with ``settings_override``
(tests, scripts) never touches the process-wide cached settings.
"""

from fastapi import Depends, Request

from donation_app.core.config import Settings, get_settings
from donation_app.db.dal import Database
from donation_app.services.catalog import SessionCatalog
from donation_app.services.orders import OrderSink, SqliteOrderSink
from donation_app.services.sources import make_reference_sources


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)


def get_session_catalog(
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_db),
) -> SessionCatalog:
    category_source, charge_source = make_reference_sources(settings, db)
    return SessionCatalog(category_source, charge_source)


def get_order_sink(
    settings: Settings = Depends(get_app_settings),
    db: Database = Depends(get_db),
) -> OrderSink:
    return SqliteOrderSink(db, settings)
