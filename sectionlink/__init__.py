import os
from flask import Flask, current_app, g
from .db.base import sqla_db
from .db.db import init_catalog_db
from .filters import register_filters
from .services.cache import CacheStore, MemoryCacheBackend
from .services.catalog import SqlCatalogSource
from .services.section_paths import SectionPathResolver

CACHE_EXTENSION = 'sectionlink.cache'

# Initialize Flask app
def create_app(test_config=None):
    """Create the flask application

    Args:
        test_config (Mapping, optional): config values applied after the defaults.

    Returns:
        Flask: the app
    """
    app = Flask(__name__, instance_relative_config=True)

    default_db = 'sqlite:///' + os.path.join(app.instance_path, 'sectionlink.db')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('SECTIONLINK_DATABASE_URI', default_db)
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SECTIONLINK_CACHE_TTL'] = 3600
    app.config['SECTIONLINK_CACHE_MAX_SIZE'] = 10000
    app.config['SECTIONLINK_CACHE_PREFIX'] = 'sectionlink:'

    if test_config is not None:
        app.config.update(test_config)

    # Ensure instance directory exists for the default sqlite file
    if app.config['SQLALCHEMY_DATABASE_URI'] == default_db:
        os.makedirs(app.instance_path, exist_ok=True)

    sqla_db.init_app(app)
    init_catalog_db(app)

    # One store per process, shared by every request
    app.extensions[CACHE_EXTENSION] = CacheStore(
        backend=MemoryCacheBackend(max_size=app.config['SECTIONLINK_CACHE_MAX_SIZE']),
        default_ttl=app.config['SECTIONLINK_CACHE_TTL'],
        key_prefix=app.config['SECTIONLINK_CACHE_PREFIX'],
    )

    # Register formatting filters
    register_filters(app)

    return app

def get_cache_store() -> CacheStore:
    return current_app.extensions[CACHE_EXTENSION]

def get_resolver() -> SectionPathResolver:
    """Resolver bound to this request's session and the app-wide cache."""
    resolver = getattr(g, '_section_resolver', None)
    if resolver is None:
        resolver = g._section_resolver = SectionPathResolver(
            SqlCatalogSource(sqla_db.session),
            get_cache_store(),
        )
    return resolver
