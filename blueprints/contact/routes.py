from flask import current_app, jsonify

from . import contact_bp
from .forms import ContactForm
from extensions import limiter, notifier
from utils.api import validated


@contact_bp.route('/contact', methods=['POST'])
@limiter.limit("5 per hour")
def contact():
    """Forward the contact form to the operators"""
    form = validated(ContactForm())
    sent = notifier.send(
        current_app.config['CONTACT_RECIPIENT'],
        'Contact Form | Spendlist',
        form.message.data,
        sender=(form.name.data, form.email.data),
    )
    if not sent:
        return jsonify({'error': {'code': 'MailFailure',
                                  'msg': 'Email could not be sent, please try again later.'}}), 503
    return jsonify({'msg': 'Email has been sent successfully!'}), 200
