"""Tests for the Flask glue: app factory, Jinja filters and settings form."""

from flask import render_template_string

from sectionlink import get_cache_store, get_resolver
from sectionlink.db.base import sqla_db
from sectionlink.forms.SectionLinkSettingsForm import (
    SectionLinkSettingsForm,
    populate_container_choices,
    prepare_settings,
)
from sectionlink.models import Section
from sectionlink.services.section_paths import LABEL_NO_VALUE, section_path_key


class TestCreateApp:
    def test_config_defaults_and_overrides(self, app):
        assert app.config["SECTIONLINK_CACHE_TTL"] == 3600
        assert app.config["SQLALCHEMY_DATABASE_URI"] == "sqlite://"

    def test_cache_store_is_shared_across_requests(self, app):
        with app.test_request_context():
            assert get_resolver().resolve_section_path(3) == "Root / Cats / Kittens"

        with app.test_request_context():
            store = get_cache_store()
            assert section_path_key(3) in store
            assert store.key_prefix == "sectionlink:"

    def test_resolver_is_reused_within_a_request(self, app):
        with app.test_request_context():
            assert get_resolver() is get_resolver()


class TestFilters:
    def test_section_path_filter(self, app):
        with app.test_request_context():
            assert render_template_string("{{ 3|section_path }}") == "Root / Cats / Kittens"
            assert render_template_string("{{ '0'|section_path }}") == LABEL_NO_VALUE

    def test_new_section_is_picked_up_after_a_miss(self, app):
        with app.test_request_context():
            assert render_template_string("{{ 50|section_path }}") == LABEL_NO_VALUE

            sqla_db.session.add(Section(id=50, container_id=1, parent_id=1, name="Dogs"))
            sqla_db.session.commit()

            assert render_template_string("{{ 50|section_path }}") == "Root / Dogs"

    def test_container_label_filter(self, app):
        with app.test_request_context():
            assert render_template_string("{{ 2|container_label }}") == "News [2]"
            assert render_template_string("{{ 0|container_label }}") == "(не выбран)"


class TestSettingsForm:
    def test_choices_and_prepared_settings(self, app):
        with app.test_request_context(method="POST", data={"container_id": "2"}):
            form = populate_container_choices(SectionLinkSettingsForm(), get_resolver())

            assert form.container_id.choices == [(0, "(не выбран)"), (1, "Catalog [1]"), (2, "News [2]")]
            assert form.validate()
            assert prepare_settings(form) == {"IBLOCK_ID": 2}

    def test_unknown_container_is_rejected(self, app):
        with app.test_request_context(method="POST", data={"container_id": "7"}):
            form = populate_container_choices(SectionLinkSettingsForm(), get_resolver())

            assert not form.validate()

    def test_unset_container_defaults_to_zero(self, app):
        with app.test_request_context():
            form = populate_container_choices(SectionLinkSettingsForm(), get_resolver())

            assert prepare_settings(form) == {"IBLOCK_ID": 0}
