from flask_wtf import FlaskForm
from wtforms import StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional


class UserProfileForm(FlaskForm):
    display_name = StringField("Display name", validators=[DataRequired(), Length(max=100)])
    bio = TextAreaField("Bio", validators=[Optional(), Length(max=500)])
    submit = SubmitField("Save profile")
