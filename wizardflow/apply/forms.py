from flask_wtf import FlaskForm
from wtforms import (
    StringField, TextAreaField, SelectField, BooleanField, IntegerField
)
from wtforms.validators import DataRequired, InputRequired, Optional, Length, NumberRange


class ApplicantForm(FlaskForm):
    name = StringField("Full name", validators=[DataRequired(), Length(max=120)])
    email = StringField("Email", validators=[DataRequired(), Length(max=255)])
    position = SelectField(
        "Position",
        choices=[
            ("analyst", "Data analyst"),
            ("engineer", "Software engineer"),
            ("technician", "Lab technician"),
        ],
        validators=[DataRequired()],
    )
    has_degree = BooleanField("I hold a college degree")


class CollegeForm(FlaskForm):
    college = StringField("College / university", validators=[DataRequired(), Length(max=255)])
    graduation_year = IntegerField("Graduation year", validators=[DataRequired(), NumberRange(min=1950, max=2100)])


class DegreeTypeForm(FlaskForm):
    degree_type = SelectField(
        "Degree",
        choices=[("BSc", "Bachelor"), ("MSc", "Master"), ("PhD", "Doctorate")],
        validators=[DataRequired()],
    )
    major = StringField("Major", validators=[Optional(), Length(max=128)])


class ExperienceForm(FlaskForm):
    years = IntegerField("Years of relevant experience", validators=[InputRequired(), NumberRange(min=0, max=60)])
    summary = TextAreaField("Summary of experience", validators=[Optional(), Length(max=2000)])


class ConfirmForm(FlaskForm):
    agree = BooleanField("The information above is correct", validators=[DataRequired()])


STEP_FORMS = {
    "job_application": ApplicantForm,
    "college": CollegeForm,
    "degree_type": DegreeTypeForm,
    "experience": ExperienceForm,
    "confirm": ConfirmForm,
}


def form_data(form: FlaskForm) -> dict:
    """Field values worth keeping in the session (no CSRF token)."""
    return {name: field.data for name, field in form._fields.items() if name != "csrf_token"}
