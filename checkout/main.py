import logging

import uvicorn

from checkout.config import settings
from checkout.db.sqlite import init_db
from checkout.services.catalog import load_catalog


def main() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    init_db()
    load_catalog()  # fail fast on a broken catalog

    uvicorn.run("checkout.web.main:app", host=settings.host, port=settings.port)

if __name__ == "__main__":
    main()
