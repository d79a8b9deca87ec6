# classvote/routes.py

# JSON API over the registration, ballot and tally services.
# Every service failure is a VotingError and is returned as {"error", "kind"}.

import logging
from urllib.parse import urlsplit

from flask import Blueprint, current_app, jsonify, request

from classvote import limiter
from classvote.errors import (
    AlreadyVoted,
    InvalidVoterOrAlreadyVoted,
    TokenExpired,
    ValidationError,
    VotingError,
)
from classvote.operations.health_monitor import check_health

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')


def _services():
    return current_app.extensions['classvote']


def _link_rate_limit():
    return current_app.config['LINK_RATE_LIMIT']


def _request_origin():
    if not current_app.config['TRUST_REQUEST_ORIGIN']:
        return None
    origin = request.headers.get('Origin')
    if origin:
        return origin
    referer = request.headers.get('Referer')
    if referer:
        parts = urlsplit(referer)
        if parts.scheme and parts.netloc:
            return f"{parts.scheme}://{parts.netloc}"
    return None


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@api.errorhandler(VotingError)
def handle_voting_error(error):
    audit = _services()['audit']
    if isinstance(error, (AlreadyVoted, InvalidVoterOrAlreadyVoted)):
        audit.log_security_event('duplicate_vote_attempt', {'endpoint': request.endpoint})
    elif isinstance(error, TokenExpired):
        audit.log_security_event('token_expired', {'endpoint': request.endpoint})
    if error.status_code >= 500:
        logger.error("%s failed: %s", request.endpoint, error.message)
    return jsonify(error.to_dict()), error.status_code


@api.get('/health')
def health():
    res = check_health(_services()['store'])
    code = 200 if res["overall_ok"] else 503
    return jsonify(res), code


@api.post('/register')
def register():
    services = _services()
    validator = services['validator']
    data = _json_body()
    email = validator.require_email(data.get('email'))
    full_name, class_label = validator.normalize_registration(data.get('fullName'), data.get('studentClass'))

    services['registration'].register_direct(email, full_name, class_label)
    services['audit'].log_security_event('voter_registered', {'class': class_label, 'method': 'direct'})
    return jsonify({'success': True, 'message': 'Registration successful'})


@api.post('/send-registration-link')
@limiter.limit(_link_rate_limit)
def send_registration_link():
    services = _services()
    data = _json_body()
    email = services['validator'].require_email(data.get('email'))

    result = services['registration'].request_registration_link(email, origin=_request_origin())
    services['audit'].log_security_event('registration_link_issued', {'email_sent': result['email_sent']})
    message = ("Registration link sent to your email" if result['email_sent']
               else "Registration link generated (email failed, use the link below)")
    return jsonify({'success': True, 'message': message,
                    'registrationLink': result['link'], 'emailSent': result['email_sent']})


@api.get('/verify-registration-token/<token>')
def verify_registration_token(token):
    result = _services()['registration'].verify_registration_token(token)
    return jsonify({'success': True, 'email': result['email']})


@api.post('/complete-registration')
def complete_registration():
    services = _services()
    validator = services['validator']
    data = _json_body()
    token = validator.require_token(data.get('token'))
    full_name, class_label = validator.normalize_registration(data.get('fullName'), data.get('studentClass'))

    services['registration'].complete_registration(token, full_name, class_label)
    services['audit'].log_security_event('voter_registered', {'class': class_label, 'method': 'link'})
    return jsonify({'success': True, 'message': 'Registration completed successfully'})


@api.post('/send-vote-link')
@limiter.limit(_link_rate_limit)
def send_vote_link():
    services = _services()
    data = _json_body()
    email = services['validator'].require_email(data.get('email'))

    result = services['issuer'].request_voting_link(email, origin=_request_origin())
    services['audit'].log_security_event('voting_link_issued', {'email_sent': result['email_sent']})
    message = ("Voting link sent to your email" if result['email_sent']
               else "Voting link generated (email failed, use the link below)")
    return jsonify({'success': True, 'message': message,
                    'votingLink': result['link'], 'emailSent': result['email_sent']})


@api.get('/candidates/<class_label>')
def candidates(class_label):
    exclude = request.args.get('exclude')
    return jsonify({'candidates': _services()['ballot_box'].list_candidates(class_label, exclude=exclude)})


@api.get('/verify-token/<token>')
def verify_token(token):
    result = _services()['issuer'].verify_voting_token(token)
    return jsonify({
        'success': True,
        'voterClass': result['class_label'],
        'voterName': result['voter_name'],
        'candidateId': result['candidate_id'],
    })


@api.post('/submit-vote')
def submit_vote():
    services = _services()
    data = _json_body()
    token = services['validator'].require_token(data.get('token'))
    votes = data.get('votes')
    if not isinstance(votes, dict):
        raise ValidationError("Missing token or votes")

    services['ballot_box'].submit_vote(
        token,
        votes.get('firstChoice'),
        votes.get('firstReason'),
        votes.get('secondChoice'),
        votes.get('secondReason'),
    )
    services['audit'].log_security_event('vote_cast')
    return jsonify({'success': True, 'message': 'Vote submitted successfully'})


@api.get('/results')
def results():
    return jsonify({'results': _services()['ballot_box'].get_results()})
