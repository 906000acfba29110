"""Entry point that opens storage and serves the users API."""

from __future__ import annotations

import logging

from users_api.config import ServiceConfig
from users_api.database import Database, StorageError

logger = logging.getLogger("users_api.main")


def _initialise_database(config: ServiceConfig) -> Database:
    database = Database(config.database_path)
    try:
        database.open()
    except StorageError as exc:
        logger.critical("Cannot open database: %s", exc)
        raise SystemExit(f"Cannot open database: {exc}") from exc

    try:
        database.ensure_schema()
    except StorageError as exc:
        logger.critical("Cannot create schema: %s", exc)
        raise SystemExit(f"Cannot create schema: {exc}") from exc

    logger.info("Database initialised at %s", config.database_path)
    return database


def _serve(*, database: Database, config: ServiceConfig) -> None:
    from users_api.api import create_app
    import uvicorn

    app = create_app(database=database, config=config)
    logger.info(
        "Starting users API on http://%s:%s%s",
        config.host,
        config.port,
        config.route_prefix,
    )
    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level,
        proxy_headers=False,
    )


def main(config: ServiceConfig | None = None) -> None:
    """Open storage, ensure the schema and start serving."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    if config is None:
        config = ServiceConfig()

    database = _initialise_database(config)
    _serve(database=database, config=config)


if __name__ == "__main__":
    main()
