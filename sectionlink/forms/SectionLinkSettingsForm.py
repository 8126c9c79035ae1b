from flask_wtf import FlaskForm
from wtforms import SelectField, SubmitField
from wtforms.validators import NumberRange

from ..filters import LABEL_NO_CONTAINER

SETTING_CONTAINER_ID = "IBLOCK_ID"

class SectionLinkSettingsForm(FlaskForm):
    container_id = SelectField("Container", coerce=int, default=0, validators=[NumberRange(min=0)])
    submit = SubmitField("Save")
    cancel = SubmitField("Cancel")

def populate_container_choices(form, resolver):
    """Fill the container dropdown from the (cached) container list."""
    form.container_id.choices = [(0, LABEL_NO_CONTAINER)] + list(resolver.list_containers().items())
    return form

def prepare_settings(form):
    """Settings to persist for the field, with the container id forced to int."""
    return {
        SETTING_CONTAINER_ID: int(form.container_id.data or 0),
    }
