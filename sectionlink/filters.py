""" Jinja2 filters that let admin templates show a section link field.

Functions:
    - section_path_filter(section_id): full "Root / Child / Leaf" name of the
      linked section, or the "nothing selected" label.

    - container_label_filter(container_id): "<name> [<id>]" label of a
      container, or "(не выбран)" when the id is unset or unknown.

    - register_filters(app): Registers the above as Jinja2 filters in a Flask
      application's Jinja environment.
"""

from .services.section_paths import coerce_id

LABEL_NO_CONTAINER = "(не выбран)"

def section_path_filter(section_id):
    # Deferred import to avoid circular import at module import time
    from . import get_resolver
    return get_resolver().resolve_section_path(section_id)

def container_label_filter(container_id):
    from . import get_resolver
    return get_resolver().list_containers().get(coerce_id(container_id), LABEL_NO_CONTAINER)

def register_filters(app):
    """
    Registers the section link filters in a Flask application.

    Args:
        app (Flask): The Flask application instance to register the filters with.
    """
    app.jinja_env.filters["section_path"] = section_path_filter
    app.jinja_env.filters["container_label"] = container_label_filter
