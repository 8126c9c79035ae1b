# sectionlink/db/db.py
import logging
from .base import sqla_db

logger = logging.getLogger(__name__)

def init_catalog_db(app):
    """Create the catalog tables if they don't exist."""
    with app.app_context():
        from .. import models  # noqa: F401  register models with SQLAlchemy
        sqla_db.create_all()
        logger.info("Catalog tables ready at %s", app.config["SQLALCHEMY_DATABASE_URI"])
