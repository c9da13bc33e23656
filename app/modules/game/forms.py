from flask_wtf import FlaskForm
from wtforms import BooleanField, FloatField, SelectField, SelectMultipleField, StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Length, NumberRange, Optional, ValidationError

from app.modules.game.models import (
    FULL_DESCRIPTION_MAX,
    SHORT_DESCRIPTION_MAX,
    DevelopmentStage,
    Genre,
    Platform,
    Visibility,
)

PRICE_TYPES = [("paid", "Paid"), ("free", "Free")]
JSON_FALSE_VALUES = (False, "false", "False", "0", "")


class GameForm(FlaskForm):
    title = StringField("Title", validators=[DataRequired(), Length(max=120)])
    short_description = StringField(
        "Short description", validators=[DataRequired(), Length(max=SHORT_DESCRIPTION_MAX)]
    )
    full_description = TextAreaField("Full description", validators=[Optional(), Length(max=FULL_DESCRIPTION_MAX)])
    genre = SelectField("Genre", choices=[(g.value, g.value) for g in Genre], validators=[DataRequired()])
    platforms = SelectMultipleField("Platforms", choices=[(p.value, p.value) for p in Platform])
    price_type = SelectField("Price type", choices=PRICE_TYPES, default="paid")
    price = FloatField("Price", validators=[Optional(), NumberRange(min=0)])
    tags = StringField("Tags (separated by commas)", validators=[Optional(), Length(max=500)])
    visibility = SelectField("Visibility", choices=[(v.value, v.value) for v in Visibility], default="public")
    stage = SelectField("Stage", choices=[(s.value, s.value) for s in DevelopmentStage], default="release")
    looking_for_publisher = BooleanField("Looking for a publisher", false_values=JSON_FALSE_VALUES)
    submit = SubmitField("Publish")

    def validate_platforms(self, field):
        if not field.data:
            raise ValidationError("Select at least one platform.")

    def validate_price(self, field):
        if self.price_type.data == "free" and field.data not in (None, 0, 0.0):
            raise ValidationError("A free game cannot have a price.")

    def get_game_data(self):
        is_free = self.price_type.data == "free"
        return {
            "title": self.title.data.strip(),
            "short_description": self.short_description.data.strip(),
            "full_description": (self.full_description.data or "").strip(),
            "genre": self.genre.data,
            "platforms": self.platforms.data,
            "is_free": is_free,
            "price": 0.0 if is_free else (self.price.data or 0.0),
            "tags": self.tags.data or "",
            "visibility": self.visibility.data,
            "stage": self.stage.data,
            "looking_for_publisher": bool(self.looking_for_publisher.data),
        }


class GameStatusForm(FlaskForm):
    status = SelectField("Status", choices=[("draft", "draft"), ("published", "published"), ("rejected", "rejected")])
