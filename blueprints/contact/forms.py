from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length


class ContactForm(FlaskForm):
    name = StringField('Name', validators=[
        DataRequired(message='Name cannot be blank'),
        Length(max=100)
    ])
    email = StringField('Email', validators=[
        DataRequired(message='Email is not valid'),
        Email(message='Email is not valid')
    ])
    message = TextAreaField('Message', validators=[
        DataRequired(message='Message cannot be blank'),
        Length(max=5000)
    ])
