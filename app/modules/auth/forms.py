from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, SelectField, StringField, SubmitField
from wtforms.validators import DataRequired, Email, Length

from app.modules.profile.models import UserType


class SignupForm(FlaskForm):
    display_name = StringField("Display name", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6)])
    user_type = SelectField(
        "Account type",
        choices=[(t.value, t.value.capitalize()) for t in UserType],
        default=UserType.DEVELOPER.value,
    )
    submit = SubmitField("Submit")


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
    remember_me = BooleanField("Remember me", false_values=(False, "false", "0", ""))
    submit = SubmitField("Login")
